import sys
from pathlib import Path

import pytest

# Ensure the package root is importable when running tests without install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wireguard_conf import InterfaceBuilder, PeerBuilder, PrivateKey  # noqa: E402


@pytest.fixture
def server_key() -> PrivateKey:
    return PrivateKey.generate()


@pytest.fixture
def server(server_key):
    return (
        InterfaceBuilder()
        .name("wg0")
        .add_address("10.0.0.1/24")
        .listen_port(51820)
        .private_key(server_key)
        .dns(["1.1.1.1", "1.0.0.1"])
        .endpoint("vpn.example.com")
        .build()
    )


@pytest.fixture
def client_peer():
    return (
        PeerBuilder()
        .name("alice")
        .private_key(PrivateKey.generate())
        .add_allowed_ip("10.0.0.2/32")
        .build()
    )
