import ipaddress
import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from .amnezia import AmneziaSettings
from .errors import (
    InvalidFieldValue,
    MissingPrivateKey,
    MissingRequiredField,
    ServerKeyUnavailable,
)
from .keys import PresharedKey, PrivateKey, PublicKey

logger = logging.getLogger(__name__)

IpInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
TableValue = Union[int, str]

TABLE_OFF = "off"
TABLE_AUTO = "auto"

# Routes everything through the tunnel
DEFAULT_ROUTE_V4 = ipaddress.ip_interface("0.0.0.0/0")
DEFAULT_ROUTE_V6 = ipaddress.ip_interface("::/0")

MTU_MIN = 576
MTU_MAX = 9000

K = TypeVar("K", PrivateKey, PublicKey, PresharedKey)


@dataclass(frozen=True)
class PublicKeyOnly:
    public_key: PublicKey


@dataclass(frozen=True)
class PrivateKeyKnown:
    private_key: PrivateKey


KeyRef = Union[PublicKeyOnly, PrivateKeyKnown]


def public_key_of(key: KeyRef) -> PublicKey:
    if isinstance(key, PrivateKeyKnown):
        return key.private_key.public_key()
    return key.public_key


@dataclass(frozen=True)
class ToInterfaceOptions:
    """Options for `Peer.to_interface`.

    default_gateway: route all traffic of the client through the server.
    persistent_keepalive: keepalive set on the client's server peer.
    """

    default_gateway: bool = False
    persistent_keepalive: Optional[int] = None

    def __post_init__(self) -> None:
        _check_range("persistent_keepalive", self.persistent_keepalive, 0, 65535)


@dataclass(frozen=True)
class Peer:
    """`[Peer]` section: one remote party as seen from an Interface.

    Use `PeerBuilder` to create peers. A peer holding its private key can be
    turned into its own client interface with `to_interface`.
    """

    key: KeyRef
    allowed_ips: Tuple[IpInterface, ...] = ()
    endpoint: Optional[str] = None
    persistent_keepalive: Optional[int] = None
    preshared_key: Optional[PresharedKey] = None
    name: Optional[str] = None
    amnezia: Optional[AmneziaSettings] = None

    @classmethod
    def builder(cls) -> "PeerBuilder":
        return PeerBuilder()

    @property
    def public_key(self) -> PublicKey:
        return public_key_of(self.key)

    @property
    def private_key(self) -> Optional[PrivateKey]:
        if isinstance(self.key, PrivateKeyKnown):
            return self.key.private_key
        return None

    def to_interface(
        self, server: "Interface", options: Optional[ToInterfaceOptions] = None
    ) -> "Interface":
        """Generate the client Interface of this peer for `server`.

        The peer's allowed IPs become the client's addresses and the server
        becomes the client's only peer.

        Raises:
            MissingPrivateKey: the peer only holds a public key.
            ServerKeyUnavailable: the server has no private key to derive
                its public key from.
        """
        options = options or ToInterfaceOptions()
        if not isinstance(self.key, PrivateKeyKnown):
            raise MissingPrivateKey()
        if server.private_key is None:
            raise ServerKeyUnavailable()

        if options.default_gateway:
            allowed_ips = default_gateway_networks(self.allowed_ips)
        else:
            allowed_ips = server.addresses

        server_peer = Peer(
            key=PublicKeyOnly(server.private_key.public_key()),
            allowed_ips=allowed_ips,
            endpoint=server.peer_endpoint(),
            persistent_keepalive=options.persistent_keepalive,
            preshared_key=self.preshared_key,
            name=server.name,
        )
        logger.debug(
            "derived client interface %s for server %s (default_gateway=%s)",
            self.name or self.public_key,
            server.name or server_peer.public_key,
            options.default_gateway,
        )
        return Interface(
            name=self.name,
            addresses=self.allowed_ips,
            private_key=self.key.private_key,
            dns=server.dns,
            peers=(server_peer,),
            amnezia=self.amnezia if self.amnezia is not None else server.amnezia,
        )


@dataclass(frozen=True)
class Interface:
    """Complete configuration: the `[Interface]` section and its peers.

    Use `InterfaceBuilder` to create interfaces. `endpoint` is only used when
    the interface is exported as a peer (see `to_peer`/`Peer.to_interface`).
    """

    name: Optional[str] = None
    addresses: Tuple[IpInterface, ...] = ()
    listen_port: Optional[int] = None
    private_key: Optional[PrivateKey] = None
    dns: Tuple[str, ...] = ()
    mtu: Optional[int] = None
    table: Optional[TableValue] = None
    pre_up: Tuple[str, ...] = ()
    post_up: Tuple[str, ...] = ()
    pre_down: Tuple[str, ...] = ()
    post_down: Tuple[str, ...] = ()
    endpoint: Optional[str] = None
    peers: Tuple[Peer, ...] = ()
    amnezia: Optional[AmneziaSettings] = None

    @classmethod
    def builder(cls) -> "InterfaceBuilder":
        return InterfaceBuilder()

    @property
    def public_key(self) -> Optional[PublicKey]:
        if self.private_key is None:
            return None
        return self.private_key.public_key()

    def peer_endpoint(self) -> Optional[str]:
        """Endpoint other peers use to reach this interface."""
        if self.endpoint is None:
            return None
        if self.listen_port is not None:
            return f"{self.endpoint}:{self.listen_port}"
        return self.endpoint

    def to_peer(self) -> Peer:
        if self.private_key is None:
            raise ServerKeyUnavailable()
        return Peer(
            key=PrivateKeyKnown(self.private_key),
            allowed_ips=self.addresses,
            endpoint=self.peer_endpoint(),
            name=self.name,
            amnezia=self.amnezia,
        )

    def with_peer(self, peer: Peer) -> "Interface":
        return replace(self, peers=self.peers + (peer,))

    def find_peer(self, name: str) -> Optional[Peer]:
        for peer in self.peers:
            if peer.name == name:
                return peer
        return None


def default_gateway_networks(addresses: Iterable[IpInterface]) -> Tuple[IpInterface, ...]:
    """0.0.0.0/0, plus ::/0 when any of `addresses` is IPv6."""
    if any(a.version == 6 for a in addresses):
        return (DEFAULT_ROUTE_V4, DEFAULT_ROUTE_V6)
    return (DEFAULT_ROUTE_V4,)


class PeerBuilder:
    """Fluent builder for `Peer`.

    Setters return the builder; `build()` validates and returns the frozen
    `Peer`. Either `public_key` or `private_key` must be set.
    """

    def __init__(self) -> None:
        self._key: Optional[KeyRef] = None
        self._raw_key: Optional[Tuple[str, Any]] = None
        self._allowed_ips: List[Any] = []
        self._endpoint: Optional[str] = None
        self._persistent_keepalive: Optional[int] = None
        self._preshared_key: Any = None
        self._name: Optional[str] = None
        self._amnezia: Optional[AmneziaSettings] = None

    def name(self, value: Optional[str]) -> "PeerBuilder":
        self._name = value
        return self

    def key(self, value: KeyRef) -> "PeerBuilder":
        self._raw_key = None
        self._key = value
        return self

    def public_key(self, value: Union[PublicKey, str]) -> "PeerBuilder":
        self._key = None
        self._raw_key = ("public", value)
        return self

    def private_key(self, value: Union[PrivateKey, str]) -> "PeerBuilder":
        self._key = None
        self._raw_key = ("private", value)
        return self

    def allowed_ips(self, values: Iterable[Any]) -> "PeerBuilder":
        self._allowed_ips = list(values)
        return self

    def add_allowed_ip(self, value: Any) -> "PeerBuilder":
        self._allowed_ips.append(value)
        return self

    def endpoint(self, value: Optional[str]) -> "PeerBuilder":
        self._endpoint = value
        return self

    def persistent_keepalive(self, value: Optional[int]) -> "PeerBuilder":
        self._persistent_keepalive = value
        return self

    def preshared_key(self, value: Union[PresharedKey, str, None]) -> "PeerBuilder":
        self._preshared_key = value
        return self

    def amnezia(self, settings: Optional[AmneziaSettings]) -> "PeerBuilder":
        self._amnezia = settings
        return self

    def build(self) -> Peer:
        key = self._key
        if key is None and self._raw_key is not None:
            kind, raw = self._raw_key
            if kind == "private":
                key = PrivateKeyKnown(_as_key(raw, PrivateKey, "private_key"))
            else:
                key = PublicKeyOnly(_as_key(raw, PublicKey, "public_key"))
        if key is None:
            raise MissingRequiredField("key")
        if self._amnezia is not None and self._amnezia.enabled:
            self._amnezia.validate_or_raise()
        return Peer(
            key=key,
            allowed_ips=tuple(_as_ip_interface(v, "allowed_ips") for v in self._allowed_ips),
            endpoint=self._endpoint or None,
            persistent_keepalive=_check_range(
                "persistent_keepalive", self._persistent_keepalive, 0, 65535
            ),
            preshared_key=(
                _as_key(self._preshared_key, PresharedKey, "preshared_key")
                if self._preshared_key is not None
                else None
            ),
            name=self._name or None,
            amnezia=self._amnezia,
        )


class InterfaceBuilder:
    """Fluent builder for `Interface`. No field is required."""

    def __init__(self) -> None:
        self._name: Optional[str] = None
        self._addresses: List[Any] = []
        self._listen_port: Optional[int] = None
        self._private_key: Any = None
        self._dns: List[str] = []
        self._mtu: Optional[int] = None
        self._table: Any = None
        self._pre_up: List[str] = []
        self._post_up: List[str] = []
        self._pre_down: List[str] = []
        self._post_down: List[str] = []
        self._endpoint: Optional[str] = None
        self._peers: List[Peer] = []
        self._amnezia: Optional[AmneziaSettings] = None

    def name(self, value: Optional[str]) -> "InterfaceBuilder":
        self._name = value
        return self

    def addresses(self, values: Iterable[Any]) -> "InterfaceBuilder":
        self._addresses = list(values)
        return self

    def add_address(self, value: Any) -> "InterfaceBuilder":
        self._addresses.append(value)
        return self

    def listen_port(self, value: Optional[int]) -> "InterfaceBuilder":
        self._listen_port = value
        return self

    def private_key(self, value: Union[PrivateKey, str, None]) -> "InterfaceBuilder":
        self._private_key = value
        return self

    def dns(self, values: Iterable[str]) -> "InterfaceBuilder":
        self._dns = list(values)
        return self

    def add_dns(self, value: str) -> "InterfaceBuilder":
        self._dns.append(value)
        return self

    def mtu(self, value: Optional[int]) -> "InterfaceBuilder":
        self._mtu = value
        return self

    def table(self, value: Optional[TableValue]) -> "InterfaceBuilder":
        self._table = value
        return self

    def endpoint(self, value: Optional[str]) -> "InterfaceBuilder":
        self._endpoint = value
        return self

    def pre_up(self, commands: Iterable[str]) -> "InterfaceBuilder":
        self._pre_up = list(commands)
        return self

    def add_pre_up(self, command: str) -> "InterfaceBuilder":
        self._pre_up.append(command)
        return self

    def post_up(self, commands: Iterable[str]) -> "InterfaceBuilder":
        self._post_up = list(commands)
        return self

    def add_post_up(self, command: str) -> "InterfaceBuilder":
        self._post_up.append(command)
        return self

    def pre_down(self, commands: Iterable[str]) -> "InterfaceBuilder":
        self._pre_down = list(commands)
        return self

    def add_pre_down(self, command: str) -> "InterfaceBuilder":
        self._pre_down.append(command)
        return self

    def post_down(self, commands: Iterable[str]) -> "InterfaceBuilder":
        self._post_down = list(commands)
        return self

    def add_post_down(self, command: str) -> "InterfaceBuilder":
        self._post_down.append(command)
        return self

    def peers(self, values: Iterable[Peer]) -> "InterfaceBuilder":
        self._peers = list(values)
        return self

    def add_peer(self, peer: Peer) -> "InterfaceBuilder":
        self._peers.append(peer)
        return self

    def amnezia(self, settings: Optional[AmneziaSettings]) -> "InterfaceBuilder":
        self._amnezia = settings
        return self

    def build(self) -> Interface:
        if self._amnezia is not None and self._amnezia.enabled:
            self._amnezia.validate_or_raise()
        return Interface(
            name=self._name or None,
            addresses=tuple(_as_ip_interface(v, "addresses") for v in self._addresses),
            listen_port=_check_range("listen_port", self._listen_port, 1, 65535),
            private_key=(
                _as_key(self._private_key, PrivateKey, "private_key")
                if self._private_key is not None
                else None
            ),
            dns=tuple(str(d) for d in self._dns),
            mtu=_check_range("mtu", self._mtu, MTU_MIN, MTU_MAX),
            table=_as_table(self._table),
            pre_up=tuple(self._pre_up),
            post_up=tuple(self._post_up),
            pre_down=tuple(self._pre_down),
            post_down=tuple(self._post_down),
            endpoint=self._endpoint or None,
            peers=tuple(self._peers),
            amnezia=self._amnezia,
        )


def _as_ip_interface(value: Any, field: str) -> IpInterface:
    if isinstance(value, (ipaddress.IPv4Interface, ipaddress.IPv6Interface)):
        return value
    if isinstance(value, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return ipaddress.ip_interface((value.network_address, value.prefixlen))
    try:
        return ipaddress.ip_interface(value.strip() if isinstance(value, str) else value)
    except (ValueError, TypeError):
        raise InvalidFieldValue(field, f"invalid IP address or network: {value!r}") from None


def _as_key(value: Any, cls: Type[K], field: str) -> K:
    if isinstance(value, cls):
        return value
    if isinstance(value, str):
        return cls.from_base64(value)
    raise InvalidFieldValue(field, f"expected {cls.__name__} or base64 string")


def _check_range(field: str, value: Any, low: int, high: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldValue(field, f"expected integer, got {value!r}")
    if value < low or value > high:
        raise InvalidFieldValue(field, f"out of range [{low}, {high}]: {value}")
    return value


def _as_table(value: Any) -> Optional[TableValue]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidFieldValue("table", f"invalid routing table: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidFieldValue("table", f"routing table must be >= 0: {value}")
        return value
    text = str(value).strip().lower()
    if text in (TABLE_OFF, TABLE_AUTO):
        return text
    if text.isdigit():
        return int(text)
    raise InvalidFieldValue("table", f"expected a number, 'off' or 'auto': {value!r}")
