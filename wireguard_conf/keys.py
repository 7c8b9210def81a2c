import base64
import binascii
import os
from dataclasses import dataclass, field

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .errors import InvalidKey

KEY_LEN = 32


def _decode(value: str, kind: str) -> bytes:
    try:
        raw = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidKey(kind) from None
    if len(raw) != KEY_LEN:
        raise InvalidKey(kind)
    return raw


def _encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


@dataclass(frozen=True)
class PublicKey:
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != KEY_LEN:
            raise InvalidKey("public")

    @classmethod
    def from_base64(cls, value: str) -> "PublicKey":
        return cls(_decode(value, "public"))

    def __str__(self) -> str:
        return _encode(self.raw)

    def __repr__(self) -> str:
        return f"PublicKey({str(self)!r})"


@dataclass(frozen=True)
class PrivateKey:
    """X25519 private key, printed in WireGuard's base64 form.

    Matches `wg genkey | wg pubkey` semantics: 32-byte raw keys, Base64 encoded.
    """

    raw: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.raw) != KEY_LEN:
            raise InvalidKey("private")

    @classmethod
    def generate(cls) -> "PrivateKey":
        key = X25519PrivateKey.generate()
        return cls(
            key.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

    @classmethod
    def from_base64(cls, value: str) -> "PrivateKey":
        return cls(_decode(value, "private"))

    def public_key(self) -> PublicKey:
        pub = (
            X25519PrivateKey.from_private_bytes(self.raw)
            .public_key()
            .public_bytes(encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)
        )
        return PublicKey(pub)

    def __str__(self) -> str:
        return _encode(self.raw)

    def __repr__(self) -> str:
        return f"PrivateKey(public={str(self.public_key())!r})"


@dataclass(frozen=True)
class PresharedKey:
    """Symmetric preshared key: 32 random bytes, Base64-encoded."""

    raw: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.raw) != KEY_LEN:
            raise InvalidKey("preshared")

    @classmethod
    def generate(cls) -> "PresharedKey":
        return cls(os.urandom(KEY_LEN))

    @classmethod
    def from_base64(cls, value: str) -> "PresharedKey":
        return cls(_decode(value, "preshared"))

    def __str__(self) -> str:
        return _encode(self.raw)

    def __repr__(self) -> str:
        return "PresharedKey(<hidden>)"


def generate_keypair() -> tuple[PrivateKey, PublicKey]:
    private_key = PrivateKey.generate()
    return private_key, private_key.public_key()
