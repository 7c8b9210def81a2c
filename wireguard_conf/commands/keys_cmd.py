import argparse
import sys

from ..errors import InvalidKey
from ..keys import PresharedKey, PrivateKey


def add_keys_cmds(subparsers: argparse._SubParsersAction) -> None:
    g = subparsers.add_parser(
        "genkey",
        help="Print a new random private key",
        description="Generates an X25519 private key in WireGuard's base64 form (like `wg genkey`).",
    )
    g.add_argument("--psk", action="store_true", help="Generate a preshared key instead (like `wg genpsk`)")
    g.set_defaults(func=run_genkey_cmd)

    p = subparsers.add_parser(
        "pubkey",
        help="Derive a public key from a private key (argument or stdin)",
        description="Prints the public key of a base64 private key given as an argument or on stdin (like `wg pubkey`).",
    )
    p.add_argument("private_key", nargs="?", default=None,
                   help="Base64 private key; read from stdin when omitted")
    p.set_defaults(func=run_pubkey_cmd)


def run_genkey_cmd(args: argparse.Namespace) -> int:
    if getattr(args, "psk", False):
        print(PresharedKey.generate())
    else:
        print(PrivateKey.generate())
    return 0


def run_pubkey_cmd(args: argparse.Namespace) -> int:
    text = getattr(args, "private_key", None)
    if text is None:
        text = sys.stdin.read()
    try:
        key = PrivateKey.from_base64(text)
    except InvalidKey as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    print(key.public_key())
    return 0
