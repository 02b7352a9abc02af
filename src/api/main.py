"""FastAPI application main module.

This module builds the ClusterRec gateway: it accepts recommendation
configurations, exposes the ranked results and pushes them to WebSocket
subscribers.
"""

import os
from typing import Dict, Optional

from fastapi import FastAPI

from src.api.exceptions import register_exception_handlers
from src.api.logging_config import RequestLoggingMiddleware
from src.api.metrics import metrics_service
from src.api.routes import recommend
from src.api.state import RecommendationState
from src.cluster.config import ClusterConfig
from src.cluster.coordinator import RecommendationCoordinator


def create_app(
    coordinator: Optional[RecommendationCoordinator] = None,
    config: Optional[ClusterConfig] = None,
) -> FastAPI:
    """Create a gateway application.

    Args:
        coordinator: Coordinator to use. When omitted, one is built from
            ``config`` (or the environment) on the first request.
        config: Cluster configuration used to build the coordinator.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="ClusterRec API",
        description="Distributed item-to-item product recommendation service",
        version="0.1.0",
    )
    app.state.recommendations = RecommendationState(coordinator=coordinator, config=config)

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(recommend.router)
    app.include_router(recommend.stream_router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Returns:
            Dictionary with status key set to "ok".
        """
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics() -> Dict:
        """Return recommendation cycle metrics."""
        return metrics_service.get_metrics()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from src.api.logging_config import setup_logging

    setup_logging(os.getenv("LOG_LEVEL", "INFO"), node="gateway")
    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
    )
