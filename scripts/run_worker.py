"""Start a ClusterRec worker.

Usage:
    python scripts/run_worker.py 9001
    python scripts/run_worker.py 9002 --host 127.0.0.1 --log-level DEBUG
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.api.logging_config import setup_logging
from src.cluster.config import DEFAULT_MAX_LINE_BYTES
from src.worker.server import WorkerServer

logger = logging.getLogger(__name__)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Run a ClusterRec worker")
    parser.add_argument("port", type=int, help="Port to listen on")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Interface to bind (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--max-line-bytes",
        type=int,
        default=DEFAULT_MAX_LINE_BYTES,
        help="Largest partition frame accepted",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level, node=f"worker-{args.port}")
    server = WorkerServer(host=args.host, port=args.port, max_line_bytes=args.max_line_bytes)

    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Worker interrupted, shutting down")
    except OSError as e:
        logger.error(f"Failed to start worker: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
