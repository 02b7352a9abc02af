"""Merging of worker results into the final ranked list."""

import logging
from typing import List, Mapping, Sequence

import numpy as np

from src.cluster.exceptions import InvalidArgumentError
from src.cluster.models import UNKNOWN_CATEGORY, AggregatedResult

# Configure module logger
logger = logging.getLogger(__name__)


def aggregate_scores(
    product_scores: Mapping[str, Sequence[float]],
    category_lookup: Mapping[str, str],
    max_results: int,
) -> List[AggregatedResult]:
    """Average, annotate, rank and truncate contributed scores.

    Each product's score is the arithmetic mean of the scores contributed by
    the workers. Categories come from the dataset-wide lookup and default to
    "unknown". Results are sorted by descending score; equal scores are
    ordered by ascending product_id so the ranking is deterministic.

    Args:
        product_scores: Product ID -> scores contributed by the workers.
        category_lookup: Product ID -> category for the whole dataset.
        max_results: Maximum number of results to return. Larger values are
            clamped to the number of products.

    Returns:
        Ranked list of at most max_results AggregatedResult.

    Raises:
        InvalidArgumentError: If max_results is negative.

    Example:
        >>> aggregate_scores({"p2": [10.0, 20.0]}, {"p2": "books"}, 5)
        [AggregatedResult(product_id='p2', stars=15.0, category='books')]
    """
    if max_results < 0:
        raise InvalidArgumentError("max_results", max_results, "must not be negative")

    results: List[AggregatedResult] = []
    for product_id, scores in product_scores.items():
        if len(scores) == 0:
            continue
        results.append(
            AggregatedResult(
                product_id=product_id,
                stars=float(np.mean(scores)),
                category=category_lookup.get(product_id, UNKNOWN_CATEGORY),
            )
        )

    results.sort(key=lambda result: (-result.stars, result.product_id))
    ranked = results[: min(max_results, len(results))]

    logger.info(
        f"Aggregated {len(results)} products, returning top {len(ranked)}",
        extra={"num_products": len(results), "max_results": max_results},
    )
    return ranked

