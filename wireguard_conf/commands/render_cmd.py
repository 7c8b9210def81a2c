import argparse
import sys

from ..common import require_and_load_config, write_output
from ..render import render_interface


def add_render_cmd(subparsers: argparse._SubParsersAction) -> None:
    r = subparsers.add_parser(
        "render",
        help="Render the server wg-quick config",
        description="Render the interface of a model file, with all of its peers, as a wg-quick config.",
    )
    r.add_argument("-c", "--config", default=None, help="Path to model file (env: WGCONF_CONFIG). Default: wireguard.yml")
    r.add_argument("-o", "--output", default=None, help="Write to this file instead of stdout")
    r.set_defaults(func=run_render_cmd)


def run_render_cmd(args: argparse.Namespace) -> int:
    interface, _ = require_and_load_config(args)
    if interface is None:
        return 2
    try:
        write_output(render_interface(interface), getattr(args, "output", None))
    except OSError as e:
        print(f"Failed to write output: {e}", file=sys.stderr)
        return 2
    return 0
