"""Start the ClusterRec master.

The master loads the ratings CSV and answers recommendation requests sent
as one JSON line: {"categories": [...], "max_results": n}.

Usage:
    python scripts/run_master.py --workers client1:9001,client2:9002
    CLUSTERREC_WORKERS=localhost:9001 python scripts/run_master.py --port 9000
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
from src.cluster.config import DEFAULT_MASTER_PORT, ClusterConfig
from src.cluster.coordinator import RecommendationCoordinator
from src.cluster.exceptions import DatasetError
from src.cluster.server import MasterServer

logger = logging.getLogger(__name__)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Run the ClusterRec master")
    parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_MASTER_PORT,
        help=f"Port to listen on (default: {DEFAULT_MASTER_PORT})",
    )
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument(
        "--workers",
        type=str,
        default=None,
        help="Comma-separated worker addresses (default: CLUSTERREC_WORKERS)",
    )
    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Ratings CSV (default: CLUSTERREC_DATA_PATH)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "INFO"),
    )
    args = parser.parse_args()

    setup_logging(args.log_level, node="master")

    config = ClusterConfig.from_env()
    if args.workers:
        config.workers = [w.strip() for w in args.workers.split(",") if w.strip()]
    if args.data:
        config.data_path = args.data

    try:
        coordinator = RecommendationCoordinator.from_config(config)
    except DatasetError as e:
        logger.error(e.message)
        sys.exit(1)

    server = MasterServer(coordinator, host=args.host, port=args.port)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Master interrupted, shutting down")
    except OSError as e:
        logger.error(f"Failed to start master: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
