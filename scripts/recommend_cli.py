"""CLI script for running one recommendation cycle.

Useful for testing a cluster by hand. Loads the ratings, dispatches the
partitions to the configured workers and prints the ranked results.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.cluster.config import ClusterConfig
from src.cluster.coordinator import RecommendationCoordinator
from src.cluster.exceptions import ClusterRecException
from src.cluster.models import RecommendationEnvelope

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def get_recommendations(
    config: ClusterConfig,
    categories: List[str],
    max_results: int = 5,
) -> RecommendationEnvelope:
    """Run one cycle against the configured workers.

    Args:
        config: Cluster configuration (workers, data path, timeouts)
        categories: Categories whose ratings are used
        max_results: Number of ranked results to return

    Returns:
        RecommendationEnvelope with the ranked results
    """
    try:
        coordinator = RecommendationCoordinator.from_config(config)
        return asyncio.run(coordinator.recommend(categories, max_results))
    except ClusterRecException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Compute product recommendations on the cluster",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py electronics books
  python scripts/recommend_cli.py books --top-n 10
  python scripts/recommend_cli.py books --workers localhost:9001,localhost:9002
        """
    )

    parser.add_argument(
        "categories",
        nargs="+",
        help="Product categories to include"
    )

    parser.add_argument(
        "--top-n",
        type=int,
        default=5,
        help="Number of recommendations to return (default: 5)"
    )

    parser.add_argument(
        "--workers",
        type=str,
        default=None,
        help="Comma-separated worker addresses (default: CLUSTERREC_WORKERS)"
    )

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Ratings CSV (default: CLUSTERREC_DATA_PATH)"
    )

    parser.add_argument(
        "--exchange-timeout",
        type=float,
        default=None,
        help="Deadline in seconds for each worker exchange (default: none)"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    config = ClusterConfig.from_env()
    if args.workers:
        config.workers = [w.strip() for w in args.workers.split(",") if w.strip()]
    if args.data:
        config.data_path = args.data
    if args.exchange_timeout is not None:
        config.exchange_timeout = args.exchange_timeout

    envelope = get_recommendations(config, args.categories, args.top_n)

    print(f"\nTop {len(envelope.results)} recommendations for {', '.join(args.categories)}:")
    for result in envelope.results:
        print(
            f"  ProductID: {result.product_id}, "
            f"Stars: {result.stars:.1f}, "
            f"Category: {result.category}"
        )

    print(
        f"\nPartitions processed: {envelope.partitions_succeeded}/"
        f"{envelope.partitions_total} "
        f"({envelope.workers_available} workers available)"
    )
    if not envelope.complete:
        print("  Warning: some partitions were not processed; results are partial.")
    print()


if __name__ == "__main__":
    main()
