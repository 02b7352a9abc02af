"""ClusterRec: distributed item-to-item product recommendation.

This package splits a user-item rating matrix across a fixed set of worker
processes, scores each partition on its worker and merges the partial results
into a single ranked list.

Modules:
    api: FastAPI gateway and REST/WebSocket endpoints
    cluster: Master side (ingestion, partitioning, dispatch, aggregation)
    worker: Worker engine and TCP server
"""

__version__ = "0.1.0"
