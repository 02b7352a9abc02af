"""Recommendation endpoints for the ClusterRec API.

This module lets clients configure a recommendation cycle, query its ranked
results and subscribe to new results over a WebSocket.
"""

import logging
import time
from typing import List

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from src.api.metrics import metrics_service
from src.api.state import RecommendationState
from src.cluster.models import AggregatedResult, RecommendationRequest

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/api",
    tags=["recommendations"],
)

# WebSocket router, mounted without prefix
stream_router = APIRouter(tags=["stream"])


class ConfigResponse(BaseModel):
    """Response model for a completed recommendation cycle.

    Attributes:
        status: Always "success" once the cycle finished.
        num_results: Number of ranked results produced.
        complete: False if some partitions were not processed.
        partitions_succeeded: Partitions whose results were merged.
        partitions_total: Partitions produced for the cycle.
    """

    status: str = Field(default="success", description="Cycle status")
    num_results: int = Field(..., description="Number of ranked results")
    complete: bool = Field(..., description="True if every partition was processed")
    partitions_succeeded: int = Field(..., description="Partitions merged")
    partitions_total: int = Field(..., description="Partitions produced")


class StatusResponse(BaseModel):
    """Completeness of the last recommendation cycle."""

    has_results: bool
    num_results: int
    complete: bool
    partitions_succeeded: int
    partitions_total: int
    workers_available: int


def get_state(request: Request) -> RecommendationState:
    return request.app.state.recommendations


@router.post("/config", response_model=ConfigResponse)
async def post_config(body: RecommendationRequest, request: Request) -> ConfigResponse:
    """Run a recommendation cycle and publish its results.

    The ranked results replace the previous ones and are pushed to every
    WebSocket subscriber.

    Args:
        body: Selected categories and maximum number of results.

    Returns:
        ConfigResponse with the size and completeness of the cycle.

    Raises:
        DatasetError: If the ratings cannot be loaded (503).

    Example:
        POST /api/config {"categories": ["books"], "max_results": 5}
    """
    state = get_state(request)
    logger.info(
        f"Configuration received: categories={body.categories}, "
        f"max_results={body.max_results}"
    )

    start_time = time.time()
    # The first call reads the ratings CSV; keep it off the event loop
    coordinator = await run_in_threadpool(state.get_coordinator)
    envelope = await coordinator.recommend(body.categories, body.max_results)
    latency_ms = (time.time() - start_time) * 1000

    state.envelope = envelope
    metrics_service.record_cycle(
        latency_ms=latency_ms,
        partitions_total=envelope.partitions_total,
        partitions_succeeded=envelope.partitions_succeeded,
    )

    delivered = await state.subscribers.broadcast(
        [result.model_dump() for result in envelope.results]
    )
    logger.info(
        f"Published {len(envelope.results)} results to {delivered} subscribers",
        extra={"complete": envelope.complete},
    )

    return ConfigResponse(
        num_results=len(envelope.results),
        complete=envelope.complete,
        partitions_succeeded=envelope.partitions_succeeded,
        partitions_total=envelope.partitions_total,
    )


@router.get("/recommendations", response_model=List[AggregatedResult])
def get_recommendations(request: Request) -> List[AggregatedResult]:
    """Return the ranked results of the last cycle."""
    return get_state(request).results


@router.get("/status", response_model=StatusResponse)
def get_status(request: Request) -> StatusResponse:
    """Report how complete the last cycle was."""
    envelope = get_state(request).envelope
    if envelope is None:
        return StatusResponse(
            has_results=False,
            num_results=0,
            complete=False,
            partitions_succeeded=0,
            partitions_total=0,
            workers_available=0,
        )
    return StatusResponse(
        has_results=True,
        num_results=len(envelope.results),
        complete=envelope.complete,
        partitions_succeeded=envelope.partitions_succeeded,
        partitions_total=envelope.partitions_total,
        workers_available=envelope.workers_available,
    )


@stream_router.websocket("/ws")
async def stream_results(websocket: WebSocket) -> None:
    """Subscribe to the results of every future cycle."""
    subscribers = websocket.app.state.recommendations.subscribers
    await websocket.accept()
    # Only accepted sockets may receive a broadcast
    subscribers.add(websocket)
    try:
        while True:
            # Incoming messages are ignored; the loop only detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Subscriber disconnected")
    finally:
        subscribers.remove(websocket)
