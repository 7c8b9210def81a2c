"""Structured (dict / YAML) form of the model.

The document mirrors the model field by field with kebab-case keys, so it
can be stored and loaded without going through the wg-quick text format.
Loading goes through the builders and applies the same validation.
"""

import logging
import os
from typing import Any, Dict, List, Mapping

import yaml  # type: ignore

from .amnezia import AmneziaSettings
from .errors import InvalidFieldValue
from .models import Interface, InterfaceBuilder, Peer, PeerBuilder, PrivateKeyKnown

logger = logging.getLogger(__name__)

_HOOK_KEYS = (
    ("pre-up", "pre_up"),
    ("post-up", "post_up"),
    ("pre-down", "pre_down"),
    ("post-down", "post_down"),
)


def amnezia_to_dict(settings: AmneziaSettings) -> Dict[str, Any]:
    data: Dict[str, Any] = {"enabled": settings.enabled}
    for key, val in settings.items():
        data[key] = val
    return data


def peer_to_dict(peer: Peer) -> Dict[str, Any]:
    item: Dict[str, Any] = {}
    if peer.name is not None:
        item["name"] = peer.name
    if isinstance(peer.key, PrivateKeyKnown):
        item["private-key"] = str(peer.key.private_key)
    else:
        item["public-key"] = str(peer.key.public_key)
    item["allowed-ips"] = [a.with_prefixlen for a in peer.allowed_ips]
    if peer.endpoint is not None:
        item["endpoint"] = peer.endpoint
    if peer.persistent_keepalive is not None:
        item["persistent-keepalive"] = peer.persistent_keepalive
    if peer.preshared_key is not None:
        item["preshared-key"] = str(peer.preshared_key)
    if peer.amnezia is not None:
        item["amnezia"] = amnezia_to_dict(peer.amnezia)
    return item


def to_dict(interface: Interface) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if interface.name is not None:
        data["name"] = interface.name
    data["address"] = [a.with_prefixlen for a in interface.addresses]
    if interface.listen_port is not None:
        data["listen-port"] = interface.listen_port
    if interface.private_key is not None:
        data["private-key"] = str(interface.private_key)
    if interface.endpoint is not None:
        data["endpoint"] = interface.endpoint
    data["dns"] = list(interface.dns)
    if interface.mtu is not None:
        data["mtu"] = interface.mtu
    if interface.table is not None:
        data["table"] = interface.table
    for key, attr in _HOOK_KEYS:
        commands = getattr(interface, attr)
        if commands:
            data[key] = list(commands)
    if interface.amnezia is not None:
        data["amnezia"] = amnezia_to_dict(interface.amnezia)
    data["peers"] = [peer_to_dict(p) for p in interface.peers]
    return data


def peer_from_dict(item: Mapping[str, Any]) -> Peer:
    b = PeerBuilder().name(_opt_str(item.get("name")))
    if item.get("private-key"):
        b.private_key(str(item["private-key"]))
    elif item.get("public-key"):
        b.public_key(str(item["public-key"]))
    b.allowed_ips(_as_list(item.get("allowed-ips"), "allowed-ips"))
    b.endpoint(_opt_str(item.get("endpoint")))
    b.persistent_keepalive(_opt_int(item.get("persistent-keepalive"), "persistent-keepalive"))
    if item.get("preshared-key"):
        b.preshared_key(str(item["preshared-key"]))
    if item.get("amnezia"):
        b.amnezia(AmneziaSettings.from_mapping(item["amnezia"]))
    return b.build()


def interface_from_dict(data: Mapping[str, Any]) -> Interface:
    b = InterfaceBuilder().name(_opt_str(data.get("name")))
    b.addresses(_as_list(data.get("address"), "address"))
    b.listen_port(_opt_int(data.get("listen-port"), "listen-port"))
    if data.get("private-key"):
        b.private_key(str(data["private-key"]))
    b.endpoint(_opt_str(data.get("endpoint")))
    b.dns(_as_list(data.get("dns"), "dns"))
    b.mtu(_opt_int(data.get("mtu"), "mtu"))
    b.table(data.get("table"))
    hooks = {attr: _as_commands(data.get(key), key) for key, attr in _HOOK_KEYS}
    b.pre_up(hooks["pre_up"]).post_up(hooks["post_up"])
    b.pre_down(hooks["pre_down"]).post_down(hooks["post_down"])
    if data.get("amnezia"):
        b.amnezia(AmneziaSettings.from_mapping(data["amnezia"]))
    raw_peers = data.get("peers") or []
    if not isinstance(raw_peers, list):
        raise InvalidFieldValue("peers", "expected a list")
    for idx, item in enumerate(raw_peers):
        if not isinstance(item, dict):
            raise InvalidFieldValue(f"peers[{idx}]", "expected a mapping")
        b.add_peer(peer_from_dict(item))
    return b.build()


def dump_yaml(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def load_yaml(text: str) -> Dict[str, Any]:
    obj = yaml.safe_load(text)
    if not isinstance(obj, dict):
        raise ValueError("Invalid YAML root: expected mapping")
    return obj


def read_file(path: str) -> Interface:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    interface = interface_from_dict(load_yaml(text))
    logger.debug("loaded %s with %d peer(s)", path, len(interface.peers))
    return interface


def write_file(path: str, interface: Interface, overwrite: bool = False) -> None:
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file: {path}")
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
    text = dump_yaml(to_dict(interface))
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    # holds private keys
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def _as_list(value: Any, field: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        parts = [p.strip() for p in value.replace("\n", ",").split(",")]
        return [p for p in parts if p]
    if isinstance(value, list):
        return [str(x) for x in value]
    raise InvalidFieldValue(field, "expected a list or comma-separated string")


def _as_commands(value: Any, field: str) -> List[str]:
    # a single command may itself contain commas
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(x) for x in value]
    raise InvalidFieldValue(field, "expected a command or a list of commands")


def _opt_str(value: Any) -> Any:
    return str(value) if value not in (None, "") else None


def _opt_int(value: Any, field: str) -> Any:
    if value is None or isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidFieldValue(field, f"expected integer, got {value!r}") from None
