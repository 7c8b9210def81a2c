import argparse
import sys

from ..common import require_and_load_config


def add_validate_cmd(subparsers: argparse._SubParsersAction) -> None:
    v = subparsers.add_parser(
        "validate",
        help="Load and validate a model file",
        description="Loads a YAML model and validates its structure and values.",
    )
    v.add_argument("-c", "--config", default=None, help="Path to model file (env: WGCONF_CONFIG). Default: wireguard.yml")
    v.set_defaults(func=run_validate_cmd)


def run_validate_cmd(args: argparse.Namespace) -> int:
    interface, _ = require_and_load_config(args)
    if interface is None:
        return 2

    problems = []
    if interface.private_key is None:
        problems.append("private-key is not set; peers cannot be derived from this interface")
    names = [p.name for p in interface.peers if p.name]
    for name in sorted({n for n in names if names.count(n) > 1}):
        problems.append(f"peer name duplicated: {name}")
    if problems:
        print("Invalid configuration:", file=sys.stderr)
        for err in problems:
            print(f"- {err}", file=sys.stderr)
        return 2

    print("Configuration is valid.")
    return 0
