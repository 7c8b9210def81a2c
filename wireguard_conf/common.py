import os
import sys
from typing import Optional, Tuple

import yaml  # type: ignore

from .config import ToolConfig
from .errors import WireguardError
from .models import Interface
from .structured import read_file


def resolve_config_path(args) -> str:
    cfg = ToolConfig.from_env(os.environ)
    cfg.apply_args_overrides(args)
    return cfg.config


def require_and_load_config(args) -> Tuple[Optional[Interface], Optional[str]]:
    path = resolve_config_path(args)
    if not os.path.exists(path):
        print(f"Config file not found: {path}", file=sys.stderr)
        return None, None
    try:
        interface = read_file(path)
    except (WireguardError, OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to parse config: {e}", file=sys.stderr)
        return None, None
    return interface, path


def write_output(text: str, output: Optional[str]) -> None:
    """Write to `output` with 0600 permissions, or to stdout when unset."""
    if not output:
        sys.stdout.write(text)
        return
    parent = os.path.dirname(os.path.abspath(output))
    os.makedirs(parent, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(text)
    try:
        os.chmod(output, 0o600)
    except OSError:
        pass
