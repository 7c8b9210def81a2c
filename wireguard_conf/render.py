from typing import Iterable, List, Optional

from .amnezia import AmneziaSettings
from .models import Interface, IpInterface, Peer, public_key_of

HOOKS = (
    ("PreUp", "pre_up"),
    ("PreDown", "pre_down"),
    ("PostUp", "post_up"),
    ("PostDown", "post_down"),
)


def render_interface(interface: Interface) -> str:
    """Render a complete wg-quick config: `[Interface]` then every `[Peer]`."""
    lines = _interface_lines(interface)
    for peer in interface.peers:
        lines.append("\n")
        lines.extend(_peer_lines(peer))
    return "".join(lines)


def render_peer(peer: Peer) -> str:
    """Render only the `[Peer]` section. Never reveals a private key."""
    return "".join(_peer_lines(peer))


def _interface_lines(s: Interface) -> List[str]:
    lines: List[str] = []
    lines.append("[Interface]\n")
    if s.name:
        lines.append(f"# Name = {s.name}\n")
    if s.addresses:
        lines.append(f"Address = {','.join(_format_address(a) for a in s.addresses)}\n")
    if s.listen_port is not None:
        lines.append(f"ListenPort = {int(s.listen_port)}\n")
    if s.private_key is not None:
        lines.append(f"PrivateKey = {s.private_key}\n")
    if s.dns:
        lines.append(f"DNS = {','.join(s.dns)}\n")
    if s.mtu is not None:
        lines.append(f"MTU = {int(s.mtu)}\n")
    if s.table is not None:
        lines.append(f"Table = {s.table}\n")
    lines.extend(_amnezia_lines(s.amnezia))

    # Hooks: one line per command, never joined
    hooks: List[str] = []
    for key, attr in HOOKS:
        for command in getattr(s, attr):
            hooks.append(f"{key} = {command}\n")
    if hooks:
        lines.append("\n")
        lines.extend(hooks)
    return lines


def _peer_lines(peer: Peer) -> List[str]:
    lines: List[str] = []
    lines.append("[Peer]\n")
    if peer.endpoint:
        lines.append(f"Endpoint = {peer.endpoint}\n")
    if peer.allowed_ips:
        lines.append(f"AllowedIPs = {_join_networks(peer.allowed_ips)}\n")
    lines.append(f"PublicKey = {public_key_of(peer.key)}\n")
    if peer.preshared_key is not None:
        lines.append(f"PresharedKey = {peer.preshared_key}\n")
    if peer.persistent_keepalive is not None:
        lines.append(f"PersistentKeepalive = {int(peer.persistent_keepalive)}\n")
    return lines


def _amnezia_lines(settings: Optional[AmneziaSettings]) -> List[str]:
    if settings is None or not settings.enabled:
        return []
    return [f"{key} = {val}\n" for key, val in settings.items()]


def _format_address(value: IpInterface) -> str:
    # host routes (/32, /128) print as bare addresses
    if value.network.prefixlen == value.max_prefixlen:
        return str(value.ip)
    return value.with_prefixlen


def _join_networks(values: Iterable[IpInterface]) -> str:
    return ",".join(v.with_prefixlen for v in values)
