import pytest

from wireguard_conf import (
    AmneziaSettings,
    InterfaceBuilder,
    PeerBuilder,
    PresharedKey,
    PrivateKey,
    render_interface,
    render_peer,
)


def test_empty_interface():
    assert render_interface(InterfaceBuilder().build()) == "[Interface]\n"


def test_full_interface_layout():
    key = PrivateKey.generate()
    peer_key = PrivateKey.generate()
    psk = PresharedKey.generate()
    peer = (
        PeerBuilder()
        .public_key(peer_key.public_key())
        .endpoint("peer.example.com:51820")
        .allowed_ips(["10.0.0.2/32", "10.10.0.0/16"])
        .preshared_key(psk)
        .persistent_keepalive(25)
        .build()
    )
    iface = (
        InterfaceBuilder()
        .name("wg0")
        .addresses(["10.0.0.1/24", "fd00::1/64"])
        .listen_port(51820)
        .private_key(key)
        .dns(["1.1.1.1", "1.0.0.1"])
        .mtu(1420)
        .table(1234)
        .add_pre_up("echo pre-up")
        .add_pre_down("echo pre-down")
        .add_post_up("echo post-up")
        .add_post_down("echo post-down")
        .add_peer(peer)
        .build()
    )
    assert render_interface(iface) == (
        "[Interface]\n"
        "# Name = wg0\n"
        "Address = 10.0.0.1/24,fd00::1/64\n"
        "ListenPort = 51820\n"
        f"PrivateKey = {key}\n"
        "DNS = 1.1.1.1,1.0.0.1\n"
        "MTU = 1420\n"
        "Table = 1234\n"
        "\n"
        "PreUp = echo pre-up\n"
        "PreDown = echo pre-down\n"
        "PostUp = echo post-up\n"
        "PostDown = echo post-down\n"
        "\n"
        "[Peer]\n"
        "Endpoint = peer.example.com:51820\n"
        "AllowedIPs = 10.0.0.2/32,10.10.0.0/16\n"
        f"PublicKey = {peer_key.public_key()}\n"
        f"PresharedKey = {psk}\n"
        "PersistentKeepalive = 25\n"
    )


def test_hooks_are_repeated_not_joined():
    iface = InterfaceBuilder().post_up(["cmd1", "cmd2"]).dns(["1.1.1.1", "1.0.0.1"]).build()
    text = render_interface(iface)
    lines = text.splitlines()
    assert lines.count("PostUp = cmd1") == 1
    assert lines.count("PostUp = cmd2") == 1
    assert lines.index("PostUp = cmd1") < lines.index("PostUp = cmd2")
    assert "cmd1;cmd2" not in text
    assert "cmd1,cmd2" not in text
    assert [line for line in lines if line.startswith("DNS")] == ["DNS = 1.1.1.1,1.0.0.1"]


def test_host_addresses_print_bare():
    iface = (
        InterfaceBuilder()
        .add_address("10.0.0.1/32")
        .add_address("1.2.3.4")
        .add_address("fd00:DEAD:BEEF::1")
        .build()
    )
    assert render_interface(iface) == "[Interface]\nAddress = 10.0.0.1,1.2.3.4,fd00:dead:beef::1\n"


@pytest.mark.parametrize(
    "setup, line",
    [
        (lambda b: b.mtu(1420), "MTU = 1420"),
        (lambda b: b.table("off"), "Table = off"),
        (lambda b: b.listen_port(51820), "ListenPort = 51820"),
        (lambda b: b.name("office"), "# Name = office"),
    ],
)
def test_interface_optional_fields(setup, line):
    assert line not in render_interface(InterfaceBuilder().build())
    text = render_interface(setup(InterfaceBuilder()).build())
    assert text.splitlines().count(line) == 1


def test_endpoint_not_rendered_in_interface():
    text = render_interface(InterfaceBuilder().endpoint("vpn.example.com").build())
    assert "vpn.example.com" not in text


def test_peer_optional_fields():
    key = PrivateKey.generate()
    bare = render_peer(PeerBuilder().public_key(key.public_key()).build())
    assert bare == f"[Peer]\nPublicKey = {key.public_key()}\n"
    for absent in ("Endpoint", "AllowedIPs", "PresharedKey", "PersistentKeepalive"):
        assert absent not in bare

    psk = PresharedKey.generate()
    text = render_peer(PeerBuilder().public_key(key.public_key()).preshared_key(psk).endpoint("h:1").build())
    assert text.splitlines().count(f"PresharedKey = {psk}") == 1
    assert text.splitlines().count("Endpoint = h:1") == 1


def test_peer_never_reveals_private_key():
    key = PrivateKey.generate()
    text = render_peer(PeerBuilder().private_key(key).build())
    assert str(key) not in text
    assert f"PublicKey = {key.public_key()}" in text


def test_peer_order_preserved():
    keys = [PrivateKey.generate() for _ in range(3)]
    b = InterfaceBuilder()
    for k in keys:
        b.add_peer(PeerBuilder().public_key(k.public_key()).build())
    text = render_interface(b.build())
    positions = [text.index(str(k.public_key())) for k in keys]
    assert positions == sorted(positions)
    assert text.count("[Peer]") == 3
    assert "\n\n\n" not in text
    assert not text.endswith("\n\n")


def test_amnezia_block_after_scalars():
    settings = AmneziaSettings(Jc=4, Jmin=8, Jmax=80, S1=20, S2=30, H1=5, H2=6, H3=7, H4=8, I1="<b 0xf6ab>")
    key = PrivateKey.generate()
    text = render_interface(InterfaceBuilder().private_key(key).mtu(1280).amnezia(settings).add_post_up("up").build())
    assert text == (
        "[Interface]\n"
        f"PrivateKey = {key}\n"
        "MTU = 1280\n"
        "Jc = 4\n"
        "Jmin = 8\n"
        "Jmax = 80\n"
        "S1 = 20\n"
        "S2 = 30\n"
        "H1 = 5\n"
        "H2 = 6\n"
        "H3 = 7\n"
        "H4 = 8\n"
        "I1 = <b 0xf6ab>\n"
        "\n"
        "PostUp = up\n"
    )


def test_amnezia_disabled_not_rendered():
    settings = AmneziaSettings(enabled=False, Jc=4)
    text = render_interface(InterfaceBuilder().amnezia(settings).build())
    assert text == "[Interface]\n"
