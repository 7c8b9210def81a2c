import argparse
import os
import sys
from typing import Optional

import qrcode
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.colormasks import HorizontalGradiantColorMask
from qrcode.image.styles.moduledrawers import RoundedModuleDrawer

from ..common import require_and_load_config, write_output
from ..config import ToolConfig
from ..errors import WireguardError
from ..models import ToInterfaceOptions
from ..render import render_interface


def add_derive_cmd(subparsers: argparse._SubParsersAction) -> None:
    c = subparsers.add_parser(
        "derive",
        help="Render the client config of a peer",
        description="Derive the client interface of a named peer from the server model and render it.",
    )
    c.add_argument("name", help="Peer name")
    c.add_argument("-c", "--config", default=None, help="Path to model file (env: WGCONF_CONFIG). Default: wireguard.yml")
    c.add_argument("-o", "--output", default=None, help="Write to this file instead of stdout")
    gw = c.add_mutually_exclusive_group()
    gw.add_argument("--default-gateway", dest="default_gateway", action="store_true", default=None,
                    help="Route all client traffic through the server (env: WGCONF_DEFAULT_GATEWAY)")
    gw.add_argument("--no-default-gateway", dest="default_gateway", action="store_false",
                    help="Route only the server's addresses")
    c.add_argument("--keepalive", type=int, default=None,
                   help="PersistentKeepalive for the server peer, 0 to omit (env: WGCONF_PERSISTENT_KEEPALIVE)")
    qr = c.add_mutually_exclusive_group()
    qr.add_argument("--qr", dest="emit_qr", action="store_true", default=None,
                    help="Also write a QR code PNG next to --output (env: WGCONF_EMIT_QR)")
    qr.add_argument("--no-qr", dest="emit_qr", action="store_false")
    c.add_argument("--qr-path", default=None, help="Explicit path of the QR code PNG")
    c.set_defaults(func=run_derive_cmd)


def run_derive_cmd(args: argparse.Namespace) -> int:
    server, _ = require_and_load_config(args)
    if server is None:
        return 2
    tool = ToolConfig.from_env(os.environ)
    tool.apply_args_overrides(args)

    peer = server.find_peer(args.name)
    if peer is None:
        print(f"Peer '{args.name}' not found", file=sys.stderr)
        return 2

    try:
        options = ToInterfaceOptions(
            default_gateway=tool.default_gateway,
            persistent_keepalive=tool.persistent_keepalive,
        )
        client = peer.to_interface(server, options)
    except WireguardError as e:
        print(f"Cannot derive client config for '{args.name}': {e}", file=sys.stderr)
        return 2

    text = render_interface(client)
    output = getattr(args, "output", None)
    qr_path = _qr_path(getattr(args, "qr_path", None), output, tool.emit_qr)
    try:
        write_output(text, output)
        if qr_path:
            _write_qr(text, qr_path)
    except OSError as e:
        print(f"Failed to write output: {e}", file=sys.stderr)
        return 2
    return 0


def _qr_path(explicit: Optional[str], output: Optional[str], emit_qr: bool) -> Optional[str]:
    if explicit:
        return explicit
    if emit_qr and output:
        return os.path.splitext(output)[0] + ".png"
    return None


def _write_qr(text: str, path: str) -> None:
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_Q)
    qr.add_data(text)
    qr.make(fit=True)
    # Horizontal gradient: left (purple) -> right (blue) with rounded modules
    color_mask = HorizontalGradiantColorMask(
        back_color=(255, 255, 255),
        left_color=(128, 0, 255),
        right_color=(0, 123, 255),
    )
    img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=RoundedModuleDrawer(),
        color_mask=color_mask,
    )
    img.save(path)
