import argparse
import sys

from ..common import require_and_load_config
from ..errors import WireguardError
from ..keys import PresharedKey, PrivateKey
from ..models import PeerBuilder
from ..structured import write_file


def add_peer_add_cmd(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "peer-add",
        help="Add a new peer with generated keys",
        description="Adds a peer with a generated private key and preshared key to the model file.",
    )
    p.add_argument("name", help="Peer name")
    p.add_argument("--address", action="append", required=True,
                   help="Peer address (its AllowedIPs on the server), repeatable, e.g. 10.10.10.2/32")
    p.add_argument("--endpoint", default=None, help="Peer endpoint host:port, if it is reachable")
    p.add_argument("--no-psk", dest="psk", action="store_false", help="Do not generate a preshared key")
    p.add_argument("-c", "--config", default=None, help="Path to model file (env: WGCONF_CONFIG). Default: wireguard.yml")
    p.set_defaults(func=run_peer_add_cmd, psk=True)


def run_peer_add_cmd(args: argparse.Namespace) -> int:
    interface, cfg_path = require_and_load_config(args)
    if interface is None or cfg_path is None:
        return 2

    name = args.name.strip()
    if not name:
        print("Peer name must be non-empty", file=sys.stderr)
        return 2
    if interface.find_peer(name) is not None:
        print(f"Peer '{name}' already exists", file=sys.stderr)
        return 2

    b = (
        PeerBuilder()
        .name(name)
        .private_key(PrivateKey.generate())
        .allowed_ips(args.address)
        .endpoint(getattr(args, "endpoint", None))
    )
    if getattr(args, "psk", True):
        b.preshared_key(PresharedKey.generate())
    try:
        peer = b.build()
    except WireguardError as e:
        print(f"Invalid peer: {e}", file=sys.stderr)
        return 2

    try:
        write_file(cfg_path, interface.with_peer(peer), overwrite=True)
    except OSError as e:
        print(f"Failed to write config: {e}", file=sys.stderr)
        return 2
    print(f"Peer '{name}' added with AllowedIPs {', '.join(a.with_prefixlen for a in peer.allowed_ips)}")
    return 0
