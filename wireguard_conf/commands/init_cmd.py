import argparse
import os
import sys
from dataclasses import replace

from ..amnezia import AmneziaSettings
from ..config import ToolConfig
from ..errors import WireguardError
from ..keys import PrivateKey
from ..models import InterfaceBuilder
from ..structured import write_file


def add_init_cmd(subparsers: argparse._SubParsersAction) -> None:
    init = subparsers.add_parser(
        "init",
        help="Generate an initial server model file (no peers)",
        description="Generate a YAML model of a server interface with a fresh private key.",
    )
    init.add_argument(
        "-o",
        "--output",
        default=None,
        help="Path to write the model (env: WGCONF_CONFIG). Default: wireguard.yml",
    )
    init.add_argument("--overwrite", action="store_true", help="Overwrite output file if it exists")
    init.add_argument("--name", default="wg0", help="Interface name, rendered as `# Name`")
    init.add_argument("--address", action="append", default=None,
                      help="Interface address in CIDR form, repeatable. Default: 10.10.10.1/24")
    init.add_argument("--listen-port", type=int, default=51820)
    init.add_argument("--endpoint", default=None, help="Public host peers use to reach this server")
    init.add_argument("--dns", default=None, help="Comma-separated DNS servers pushed to clients")
    init.add_argument("--mtu", type=int, default=None)

    amn = init.add_mutually_exclusive_group()
    amn.add_argument("--amnezia", dest="amnezia", action="store_true", default=None,
                     help="Add AmneziaWG obfuscation parameters (env: WGCONF_AMNEZIA_ENABLED)")
    amn.add_argument("--no-amnezia", dest="amnezia", action="store_false")
    init.set_defaults(func=run_init_cmd)


def run_init_cmd(args: argparse.Namespace) -> int:
    tool = ToolConfig.from_env(os.environ)
    tool.apply_args_overrides(args)
    out_path = getattr(args, "output", None) or tool.config
    overwrite = bool(getattr(args, "overwrite", False))
    if os.path.exists(out_path) and not overwrite:
        print(f"Refusing to overwrite existing file: {out_path}. Use --overwrite to replace.", file=sys.stderr)
        return 2

    listen_port = getattr(args, "listen_port", None)
    b = (
        InterfaceBuilder()
        .name(getattr(args, "name", None) or "wg0")
        .addresses(getattr(args, "address", None) or ["10.10.10.1/24"])
        .listen_port(51820 if listen_port is None else listen_port)
        .private_key(PrivateKey.generate())
        .endpoint(getattr(args, "endpoint", None))
        .mtu(getattr(args, "mtu", None))
    )
    dns = getattr(args, "dns", None)
    if dns:
        b.dns(d.strip() for d in dns.split(",") if d.strip())

    try:
        if tool.amnezia_enabled:
            # the flag wins over WGCONF_AMNEZIA_ENABLED; fill missing values within recommended ranges
            settings = replace(AmneziaSettings.from_env(os.environ), enabled=True)
            b.amnezia(settings.with_recommended_defaults())
        interface = b.build()
    except WireguardError as e:
        print(f"Config validation failed: {e}", file=sys.stderr)
        return 2

    try:
        write_file(out_path, interface, overwrite=overwrite)
    except OSError as e:
        print(f"Failed to write config: {e}", file=sys.stderr)
        return 2
    print(f"Config written to {out_path}")
    return 0
