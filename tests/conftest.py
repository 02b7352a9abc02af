"""Shared fixtures for the ClusterRec tests."""

import asyncio
import socket
import sys
from pathlib import Path
from typing import Awaitable, Callable, Tuple

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.cluster.models import RatingRecord

ConnectionHandler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


async def start_stub_worker(handler: ConnectionHandler) -> Tuple[asyncio.AbstractServer, str]:
    """Start a TCP server on a free local port running ``handler``."""
    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    return server, f"127.0.0.1:{port}"


def closed_address() -> str:
    """Return a local address nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"


@pytest.fixture
def two_user_partition():
    """Partition with two users rating the same two products."""
    return {"u1": {"p1": 5.0, "p2": 3.0}, "u2": {"p1": 4.0, "p2": 2.0}}


@pytest.fixture
def sample_records():
    """Small ratings dataset over two categories."""
    rows = [
        ("u1", "p1", 5.0, "electronics"),
        ("u1", "p2", 3.0, "books"),
        ("u2", "p1", 4.0, "electronics"),
        ("u2", "p3", 2.0, "books"),
        ("u3", "p2", 1.0, "books"),
        ("u3", "p3", 5.0, "books"),
        ("u4", "p4", 4.0, "toys"),
    ]
    return [
        RatingRecord(reviewer_id=r, product_id=p, stars=s, category=c)
        for r, p, s, c in rows
    ]
