from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "WGCONF_"


@dataclass()
class ToolConfig:
    """Defaults for the command line tool, read from WGCONF_* and flags."""

    config: str = "wireguard.yml"
    emit_qr: bool = False
    default_gateway: bool = True
    persistent_keepalive: Optional[int] = 25
    amnezia_enabled: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "ToolConfig":
        r = EnvReader(env)
        keepalive = r.get_int("PERSISTENT_KEEPALIVE", 25)
        return cls(
            config=r.get("CONFIG", "wireguard.yml") or "wireguard.yml",
            emit_qr=r.get_bool("EMIT_QR", False),
            default_gateway=r.get_bool("DEFAULT_GATEWAY", True),
            # 0 disables keepalive
            persistent_keepalive=keepalive or None,
            amnezia_enabled=r.get_bool("AMNEZIA_ENABLED", False),
        )

    def apply_args_overrides(self, args: object) -> None:
        if getattr(args, "config", None) is not None:
            self.config = str(getattr(args, "config"))
        if getattr(args, "emit_qr", None) is not None:
            self.emit_qr = bool(getattr(args, "emit_qr"))
        if getattr(args, "default_gateway", None) is not None:
            self.default_gateway = bool(getattr(args, "default_gateway"))
        if getattr(args, "keepalive", None) is not None:
            self.persistent_keepalive = int(getattr(args, "keepalive")) or None
        if getattr(args, "amnezia", None) is not None:
            self.amnezia_enabled = bool(getattr(args, "amnezia"))


class EnvReader:
    def __init__(self, env: Mapping[str, str], prefix: str = ENV_PREFIX) -> None:
        self._env = env
        self._prefix = prefix

    def with_prefix(self, more: str) -> "EnvReader":
        return EnvReader(self._env, self._prefix + more)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._env.get(self._prefix + key, default)

    def get_bool(self, key: str, default: bool) -> bool:
        val = self._env.get(self._prefix + key)
        if val is None:
            return default
        val_lower = val.strip().lower()
        if val_lower in {"1", "true", "yes", "y", "on"}:
            return True
        if val_lower in {"0", "false", "no", "n", "off"}:
            return False
        return default

    def get_int(self, key: str, default: int) -> int:
        val = self._env.get(self._prefix + key)
        if val is None:
            return default
        try:
            return int(val)
        except ValueError:
            return default
