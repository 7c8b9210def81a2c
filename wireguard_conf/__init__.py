from .amnezia import AmneziaSettings
from .errors import (
    WireguardError,
    ValidationError,
    MissingRequiredField,
    InvalidFieldValue,
    InvalidAmneziaSetting,
    InvalidKey,
    DerivationError,
    MissingPrivateKey,
    ServerKeyUnavailable,
)
from .keys import PrivateKey, PublicKey, PresharedKey, generate_keypair
from .models import (
    Interface,
    InterfaceBuilder,
    Peer,
    PeerBuilder,
    PublicKeyOnly,
    PrivateKeyKnown,
    KeyRef,
    ToInterfaceOptions,
    public_key_of,
)
from .render import render_interface, render_peer

__all__ = [
    "AmneziaSettings",
    "WireguardError",
    "ValidationError",
    "MissingRequiredField",
    "InvalidFieldValue",
    "InvalidAmneziaSetting",
    "InvalidKey",
    "DerivationError",
    "MissingPrivateKey",
    "ServerKeyUnavailable",
    "PrivateKey",
    "PublicKey",
    "PresharedKey",
    "generate_keypair",
    "Interface",
    "InterfaceBuilder",
    "Peer",
    "PeerBuilder",
    "PublicKeyOnly",
    "PrivateKeyKnown",
    "KeyRef",
    "ToInterfaceOptions",
    "public_key_of",
    "render_interface",
    "render_peer",
]
