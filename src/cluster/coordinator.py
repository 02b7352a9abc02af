"""One recommendation cycle on the master.

Filters the ratings, builds and partitions the user-item matrix, probes the
workers, dispatches the partitions and aggregates the responses.
"""

import logging
import time
from typing import Dict, Iterable, List

from src.cluster.aggregator import aggregate_scores
from src.cluster.config import ClusterConfig
from src.cluster.dispatcher import ScoreAccumulator, dispatch_partitions
from src.cluster.exceptions import InvalidArgumentError
from src.cluster.ingest import filter_by_categories, load_ratings
from src.cluster.matrix import build_user_item_matrix, partition_matrix
from src.cluster.models import RatingRecord, RecommendationEnvelope
from src.cluster.prober import probe_workers

# Configure module logger
logger = logging.getLogger(__name__)


class RecommendationCoordinator:
    """Runs recommendation cycles over a fixed worker set.

    Holds the loaded ratings and category lookup; every call to
    ``recommend`` builds its own matrix, partitions and accumulator.
    """

    def __init__(
        self,
        config: ClusterConfig,
        records: Iterable[RatingRecord],
        category_lookup: Dict[str, str],
    ):
        self.config = config
        self.records: List[RatingRecord] = list(records)
        self.category_lookup = category_lookup

        logger.info(
            f"Initialized RecommendationCoordinator: "
            f"{len(self.records)} ratings, "
            f"{len(config.workers)} workers"
        )

    @classmethod
    def from_config(cls, config: ClusterConfig) -> "RecommendationCoordinator":
        """Load the ratings CSV named by the configuration."""
        records, category_lookup = load_ratings(config.data_path)
        return cls(config, records, category_lookup)

    async def recommend(
        self,
        categories: Iterable[str],
        max_results: int,
    ) -> RecommendationEnvelope:
        """Compute the ranked recommendations for the selected categories.

        Worker failures never fail the cycle; they only lower
        ``partitions_succeeded`` and clear ``complete`` in the envelope. If
        every worker fails the envelope holds an empty result list.

        Args:
            categories: Categories whose ratings are used.
            max_results: Maximum number of ranked results.

        Returns:
            RecommendationEnvelope with the ranked results and completeness
            counters.

        Raises:
            InvalidArgumentError: If no workers are configured or max_results
                is negative.
        """
        if max_results < 0:
            raise InvalidArgumentError("max_results", max_results, "must not be negative")

        start_time = time.time()
        categories = list(categories)

        filtered = filter_by_categories(self.records, categories)
        matrix = build_user_item_matrix(filtered)
        partitions = partition_matrix(matrix, len(self.config.workers))

        available = await probe_workers(
            self.config.workers, timeout=self.config.probe_timeout
        )

        accumulator = ScoreAccumulator()
        report = await dispatch_partitions(
            self.config.workers,
            available,
            partitions,
            accumulator,
            exchange_timeout=self.config.exchange_timeout,
            max_retries=self.config.max_retries,
            max_line_bytes=self.config.max_line_bytes,
        )

        results = aggregate_scores(accumulator.scores, self.category_lookup, max_results)

        envelope = RecommendationEnvelope(
            results=results,
            partitions_total=report.partitions_total,
            partitions_succeeded=report.succeeded,
            workers_available=report.workers_available,
            complete=report.complete,
        )

        logger.info(
            "Recommendation cycle completed",
            extra={
                "categories": categories,
                "max_results": max_results,
                "num_results": len(results),
                "partitions_succeeded": report.succeeded,
                "partitions_total": report.partitions_total,
                "complete": envelope.complete,
                "total_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return envelope
