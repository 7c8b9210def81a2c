from typing import Optional


class WireguardError(Exception):
    """Base class for every error raised by wireguard_conf."""


class ValidationError(WireguardError, ValueError):
    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"invalid field: {field}")


class MissingRequiredField(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"missing required field: {field}")


class InvalidFieldValue(ValidationError):
    def __init__(self, field: str, reason: str) -> None:
        self.reason = reason
        super().__init__(field, f"{field}: {reason}")


class InvalidAmneziaSetting(ValidationError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"invalid amnezia setting: {name}")


class InvalidKey(WireguardError, ValueError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"invalid {kind} key")


class DerivationError(WireguardError):
    pass


class MissingPrivateKey(DerivationError):
    def __init__(self) -> None:
        super().__init__("no private key provided: peer only holds a public key")


class ServerKeyUnavailable(DerivationError):
    def __init__(self) -> None:
        super().__init__("server interface has no private key to derive a public key from")
