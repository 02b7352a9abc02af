"""Availability probing of worker endpoints."""

import asyncio
import logging
from typing import List, Tuple

from src.cluster.config import DEFAULT_PROBE_TIMEOUT
from src.cluster.exceptions import WorkerConnectionError
from src.cluster.protocol import close_writer

# Configure module logger
logger = logging.getLogger(__name__)


def parse_address(address: str) -> Tuple[str, int]:
    """Split a "host:port" address.

    IPv6 hosts are written in brackets, as in "[::1]:9001".

    Raises:
        ValueError: If the address has no port or the port is not a number.
    """
    host, sep, port = address.rpartition(":")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not sep or not host:
        raise ValueError(f"Address must be 'host:port', got {address!r}")
    return host, int(port)


async def probe_worker(address: str, timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
    """Open and immediately close a connection to a worker.

    Raises:
        WorkerConnectionError: If the worker does not accept a connection
            within the timeout.
    """
    try:
        host, port = parse_address(address)
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except (asyncio.TimeoutError, OSError, ValueError) as e:
        raise WorkerConnectionError(address, e) from e
    await close_writer(writer)


async def probe_workers(
    addresses: List[str],
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> List[str]:
    """Return the workers that accept a connection, in configuration order.

    Each address gets a single attempt bounded by the timeout. Unreachable
    workers are logged and left out.

    Args:
        addresses: Worker addresses as "host:port".
        timeout: Seconds allowed per connection attempt.

    Returns:
        Ordered sublist of addresses that responded.
    """
    available: List[str] = []
    for address in addresses:
        try:
            await probe_worker(address, timeout=timeout)
        except WorkerConnectionError as e:
            logger.warning(
                "Worker unavailable",
                extra={"address": address, "error": e.details.get("error")},
            )
            continue
        available.append(address)

    logger.info(
        f"{len(available)} of {len(addresses)} workers available",
        extra={"available_workers": available},
    )
    return available
