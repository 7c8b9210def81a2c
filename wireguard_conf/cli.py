import argparse
import logging
from typing import Callable, Optional

from .commands.derive_cmd import add_derive_cmd
from .commands.init_cmd import add_init_cmd
from .commands.keys_cmd import add_keys_cmds
from .commands.peer_add_cmd import add_peer_add_cmd
from .commands.render_cmd import add_render_cmd
from .commands.validate_cmd import add_validate_cmd

CommandHandler = Callable[[argparse.Namespace], int]


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wireguard-conf",
        description="WireGuard config generator.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    # Subcommands are responsible for their own --config options

    sub = p.add_subparsers(dest="command", required=True)
    add_keys_cmds(sub)
    add_init_cmd(sub)  # init does not require a pre-existing model
    add_peer_add_cmd(sub)
    add_validate_cmd(sub)
    add_render_cmd(sub)
    add_derive_cmd(sub)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    handler: Optional[CommandHandler] = getattr(args, "func", None)
    if handler is None:
        parser.error("No subcommand handler attached")
    return handler(args)
