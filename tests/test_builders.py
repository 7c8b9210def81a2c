import ipaddress
from dataclasses import replace

import pytest

from wireguard_conf import (
    AmneziaSettings,
    InvalidAmneziaSetting,
    InvalidFieldValue,
    InvalidKey,
    InterfaceBuilder,
    MissingRequiredField,
    PeerBuilder,
    PrivateKey,
    PrivateKeyKnown,
    PublicKeyOnly,
    ValidationError,
)


def test_peer_without_key_fails():
    with pytest.raises(MissingRequiredField) as exc:
        PeerBuilder().add_allowed_ip("10.0.0.2/32").build()
    assert exc.value.field == "key"
    assert isinstance(exc.value, ValidationError)


def test_peer_with_either_key_form():
    priv = PrivateKey.generate()
    with_private = PeerBuilder().private_key(priv).build()
    with_public = PeerBuilder().public_key(priv.public_key()).build()
    assert with_private.key == PrivateKeyKnown(priv)
    assert with_public.key == PublicKeyOnly(priv.public_key())
    assert with_private.public_key == with_public.public_key
    assert with_public.private_key is None


def test_peer_key_from_base64_string():
    priv = PrivateKey.generate()
    peer = PeerBuilder().public_key(str(priv.public_key())).build()
    assert peer.public_key == priv.public_key()
    with pytest.raises(InvalidKey):
        PeerBuilder().public_key("nope").build()


def test_last_key_setter_wins():
    priv = PrivateKey.generate()
    other = PrivateKey.generate()
    peer = PeerBuilder().public_key(other.public_key()).private_key(priv).build()
    assert peer.key == PrivateKeyKnown(priv)


def test_empty_interface_is_legal():
    iface = InterfaceBuilder().build()
    assert iface.addresses == ()
    assert iface.private_key is None
    assert iface.peers == ()


def test_interface_fields():
    key = PrivateKey.generate()
    iface = (
        InterfaceBuilder()
        .add_address("10.0.0.1/24")
        .add_address(ipaddress.ip_address("fd00::1"))
        .add_address(ipaddress.ip_network("10.1.0.0/16"))
        .listen_port(6969)
        .private_key(key)
        .dns(["8.8.8.8"])
        .add_dns("8.8.4.4")
        .endpoint("vpn.example.com")
        .table("off")
        .mtu(1420)
        .build()
    )
    assert [a.with_prefixlen for a in iface.addresses] == ["10.0.0.1/24", "fd00::1/128", "10.1.0.0/16"]
    assert iface.listen_port == 6969
    assert iface.private_key == key
    assert iface.dns == ("8.8.8.8", "8.8.4.4")
    assert iface.endpoint == "vpn.example.com"
    assert iface.table == "off"
    assert iface.mtu == 1420


@pytest.mark.parametrize(
    "setup, field",
    [
        (lambda b: b.listen_port(0), "listen_port"),
        (lambda b: b.listen_port(70000), "listen_port"),
        (lambda b: b.mtu(100), "mtu"),
        (lambda b: b.table("main"), "table"),
        (lambda b: b.table(-1), "table"),
        (lambda b: b.add_address("not-a-cidr"), "addresses"),
    ],
)
def test_interface_invalid_values(setup, field):
    with pytest.raises(InvalidFieldValue) as exc:
        setup(InterfaceBuilder()).build()
    assert exc.value.field == field


def test_table_values():
    assert InterfaceBuilder().table(1234).build().table == 1234
    assert InterfaceBuilder().table("1234").build().table == 1234
    assert InterfaceBuilder().table("AUTO").build().table == "auto"


def test_peer_keepalive_range():
    priv = PrivateKey.generate()
    with pytest.raises(InvalidFieldValue) as exc:
        PeerBuilder().private_key(priv).persistent_keepalive(-1).build()
    assert exc.value.field == "persistent_keepalive"
    assert PeerBuilder().private_key(priv).persistent_keepalive(25).build().persistent_keepalive == 25


def test_invalid_amnezia_rejected_at_build():
    bad = AmneziaSettings.random()
    bad = replace(bad, Jc=9999)
    with pytest.raises(InvalidAmneziaSetting) as exc:
        InterfaceBuilder().amnezia(bad).build()
    assert exc.value.field == "Jc"
    # disabled settings are not validated
    InterfaceBuilder().amnezia(replace(bad, enabled=False)).build()


def test_built_values_are_independent():
    priv = PrivateKey.generate()
    b = PeerBuilder().private_key(priv).add_allowed_ip("10.0.0.2/32")
    first = b.build()
    b.add_allowed_ip("10.0.0.3/32")
    second = b.build()
    assert len(first.allowed_ips) == 1
    assert len(second.allowed_ips) == 2

    iface_b = InterfaceBuilder().add_peer(first)
    iface = iface_b.build()
    iface_b.add_peer(second)
    assert iface.peers == (first,)
