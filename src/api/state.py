"""Per-application state of the API gateway.

The gateway keeps the last recommendation cycle and its WebSocket
subscribers in objects owned by the application instead of module globals.
"""

import logging
from typing import Any, List, Optional

from fastapi import WebSocket, WebSocketDisconnect

from src.cluster.config import ClusterConfig
from src.cluster.coordinator import RecommendationCoordinator
from src.cluster.models import AggregatedResult, RecommendationEnvelope

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """WebSocket connections waiting for new results."""

    def __init__(self) -> None:
        self._subscribers: List[WebSocket] = []

    def add(self, websocket: WebSocket) -> None:
        self._subscribers.append(websocket)
        logger.info(f"Subscriber added ({len(self._subscribers)} connected)")

    def remove(self, websocket: WebSocket) -> None:
        if websocket in self._subscribers:
            self._subscribers.remove(websocket)
            logger.info(f"Subscriber removed ({len(self._subscribers)} connected)")

    def __len__(self) -> int:
        return len(self._subscribers)

    async def broadcast(self, payload: Any) -> int:
        """Send a JSON payload to every subscriber.

        Subscribers whose send fails are dropped.

        Returns:
            Number of subscribers that received the payload.
        """
        delivered = 0
        for websocket in list(self._subscribers):
            try:
                await websocket.send_json(payload)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning(f"Dropping subscriber after failed send: {e}")
                self.remove(websocket)
                continue
            delivered += 1
        return delivered


class RecommendationState:
    """Coordinator, last results and subscribers of one gateway."""

    def __init__(
        self,
        coordinator: Optional[RecommendationCoordinator] = None,
        config: Optional[ClusterConfig] = None,
    ):
        self._coordinator = coordinator
        self._config = config
        self.envelope: Optional[RecommendationEnvelope] = None
        self.subscribers = SubscriberRegistry()

    def get_coordinator(self) -> RecommendationCoordinator:
        """Return the coordinator, loading the ratings on first use.

        Raises:
            DatasetError: If the configured ratings file cannot be loaded.
        """
        if self._coordinator is None:
            config = self._config or ClusterConfig.from_env()
            logger.info(f"Loading ratings from {config.data_path}")
            self._coordinator = RecommendationCoordinator.from_config(config)
        return self._coordinator

    @property
    def results(self) -> List[AggregatedResult]:
        """Results of the last cycle, empty before the first one."""
        return self.envelope.results if self.envelope is not None else []
