"""TCP server hosting the worker engine.

Each connection carries one exchange: the master sends a partition frame,
the worker answers with one frame of predicted results and closes.
"""

import asyncio
import logging
from typing import Optional

from src.cluster.config import DEFAULT_MAX_LINE_BYTES
from src.cluster.exceptions import ClusterRecException, TransportError
from src.cluster.protocol import (
    close_writer,
    decode_partition,
    encode_results,
    read_frame,
    write_frame,
)
from src.worker.engine import run_engine

# Configure module logger
logger = logging.getLogger(__name__)


def _closed_before_frame(error: TransportError) -> bool:
    """True if the peer closed without sending a single byte."""
    cause = error.__cause__
    return (
        error.stage == "read"
        and isinstance(cause, asyncio.IncompleteReadError)
        and not cause.partial
    )


class WorkerServer:
    """Asyncio TCP server answering partition requests.

    Attributes:
        host: Interface to bind.
        port: Port to bind; 0 picks a free port, available as ``port`` after start.
        max_line_bytes: Largest partition frame accepted.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 9001,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ):
        self.host = host
        self.port = port
        self.max_line_bytes = max_line_bytes
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def address(self) -> str:
        """Address of the server as "host:port"."""
        return f"{self.host}:{self.port}"

    async def start(self) -> None:
        """Bind the listening socket."""
        self._server = await asyncio.start_server(
            self.handle_connection,
            self.host,
            self.port,
            limit=self.max_line_bytes,
        )
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info(f"Worker listening on {self.address}")

    async def serve_forever(self) -> None:
        """Start if needed and serve until cancelled."""
        if self._server is None:
            await self.start()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self) -> None:
        """Stop accepting connections."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info(f"Worker on {self.address} stopped")

    async def handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Serve one partition exchange."""
        peername = writer.get_extra_info("peername")
        peer = f"{peername[0]}:{peername[1]}" if peername else "master"
        logger.info("Connection from master", extra={"peer": peer})

        try:
            frame = await read_frame(reader, peer)
            partition = decode_partition(frame, peer)

            loop = asyncio.get_running_loop()
            results = await loop.run_in_executor(None, run_engine, partition)

            await write_frame(writer, encode_results(results), peer)
            logger.info(
                f"Sent {len(results)} results to master", extra={"peer": peer}
            )
        except TransportError as e:
            if _closed_before_frame(e):
                # The master's availability check connects and closes at once
                logger.debug("Connection closed before a partition", extra={"peer": peer})
            else:
                logger.error(
                    "Partition exchange failed",
                    extra={
                        "peer": peer,
                        "error": e.message,
                        "error_type": type(e).__name__,
                    },
                )
        except ClusterRecException as e:
            logger.error(
                "Partition exchange failed",
                extra={
                    "peer": peer,
                    "error": e.message,
                    "error_type": type(e).__name__,
                },
            )
        finally:
            await close_writer(writer)
