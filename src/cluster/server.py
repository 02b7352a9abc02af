"""TCP front end of the master.

Accepts one request frame per connection, ``{"categories": [...],
"max_results": n}``, runs a recommendation cycle and answers with one frame
holding the ranked results.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from src.cluster.config import DEFAULT_MASTER_PORT
from src.cluster.coordinator import RecommendationCoordinator
from src.cluster.exceptions import ClusterRecException, DecodeError
from src.cluster.models import AggregatedResult, RecommendationRequest
from src.cluster.protocol import FRAME_DELIMITER, close_writer, read_frame, write_frame

# Configure module logger
logger = logging.getLogger(__name__)

_AGGREGATED_ADAPTER = TypeAdapter(List[AggregatedResult])


class MasterServer:
    """Asyncio TCP server exposing the coordinator."""

    def __init__(
        self,
        coordinator: RecommendationCoordinator,
        host: str = "0.0.0.0",
        port: int = DEFAULT_MASTER_PORT,
    ):
        self.coordinator = coordinator
        self.host = host
        self.port = port
        self._server: Optional[asyncio.AbstractServer] = None

    async def start(self) -> None:
        """Bind the listening socket."""
        self._server = await asyncio.start_server(
            self.handle_connection, self.host, self.port
        )
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info(f"Master listening on {self.host}:{self.port}")

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

    async def handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Serve one recommendation request."""
        peername = writer.get_extra_info("peername")
        peer = f"{peername[0]}:{peername[1]}" if peername else "client"

        try:
            frame = await read_frame(reader, peer)
            try:
                request = RecommendationRequest.model_validate_json(frame)
            except ValidationError as e:
                raise DecodeError(peer, e) from e

            logger.info(
                "Recommendation request received",
                extra={
                    "peer": peer,
                    "categories": request.categories,
                    "max_results": request.max_results,
                },
            )
            envelope = await self.coordinator.recommend(
                request.categories, request.max_results
            )
            response = _AGGREGATED_ADAPTER.dump_json(envelope.results) + FRAME_DELIMITER
            await write_frame(writer, response, peer)
        except ClusterRecException as e:
            logger.error(
                "Recommendation request failed",
                extra={
                    "peer": peer,
                    "error": e.message,
                    "error_type": type(e).__name__,
                },
            )
        finally:
            await close_writer(writer)
