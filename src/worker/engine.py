"""Scoring pipeline run by a worker on one partition.

The pipeline has three steps:

1. Co-occurrence scoring: for every user and every ordered pair (i, j) of
   distinct items the user rated, ``similarity[i][j] += rating[i] * rating[j]``.
   This is an unnormalized dot product, not a cosine similarity.
2. Min-max scaling of every score to [0, 1] using the global minimum and
   maximum of the partition's scores.
3. Prediction: ``predicted[j] = scaled[i][j] * rating[i]`` for every item i a
   user rated and every item j related to i. When several (user, i) pairs
   predict the same j, the last one computed is kept.

The engine is a pure function of its input; nothing is kept between runs.
"""

import logging
import time
from typing import Dict, List, Tuple

import numpy as np

from src.cluster.exceptions import DegenerateScaleError
from src.cluster.models import (
    UNKNOWN_CATEGORY,
    PredictedResult,
    SimilarityMatrix,
    UserItemMatrix,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Scaled value assigned to every score when all scores are equal
DEGENERATE_SCALE_FALLBACK = 1.0


def compute_similarities(partition: UserItemMatrix) -> SimilarityMatrix:
    """Accumulate item co-occurrence scores over every user in the partition.

    Every rated item gets a row, which stays empty when the item never
    co-occurs with another one.

    Args:
        partition: User -> item -> rating mapping.

    Returns:
        Item -> co-occurring item -> accumulated score.

    Example:
        >>> sims = compute_similarities({"u1": {"p1": 5, "p2": 3}, "u2": {"p1": 4, "p2": 2}})
        >>> sims["p1"]["p2"]
        23.0
    """
    similarities: SimilarityMatrix = {}
    for items in partition.values():
        for item_i, rating_i in items.items():
            row = similarities.setdefault(item_i, {})
            for item_j, rating_j in items.items():
                if item_i == item_j:
                    continue
                row[item_j] = row.get(item_j, 0.0) + float(rating_i) * float(rating_j)
    return similarities


def min_max_bounds(similarities: SimilarityMatrix) -> Tuple[float, float]:
    """Return the global (min, max) over every score.

    Raises:
        ValueError: If there are no scores at all.
        DegenerateScaleError: If every score has the same value.
    """
    values = np.fromiter(
        (score for row in similarities.values() for score in row.values()),
        dtype=np.float64,
    )
    if values.size == 0:
        raise ValueError("Cannot compute bounds of an empty similarity matrix")

    min_score = float(values.min())
    max_score = float(values.max())
    if max_score == min_score:
        raise DegenerateScaleError(min_score)
    return min_score, max_score


def scale_similarities(similarities: SimilarityMatrix) -> SimilarityMatrix:
    """Rescale every score to [0, 1] with global min-max scaling.

    When every score is equal there is no range to scale by; every score is
    then set to DEGENERATE_SCALE_FALLBACK. An empty matrix keeps its rows and
    has no scores.

    Args:
        similarities: Item -> item -> raw co-occurrence score.

    Returns:
        Matrix of the same shape with scaled scores.
    """
    try:
        min_score, max_score = min_max_bounds(similarities)
    except ValueError:
        logger.debug("No co-occurring items in partition, nothing to scale")
        return {item: {} for item in similarities}
    except DegenerateScaleError as e:
        logger.warning(
            "All similarity scores are equal, using fallback scale",
            extra={"value": e.value, "fallback": DEGENERATE_SCALE_FALLBACK},
        )
        return {
            item: {related: DEGENERATE_SCALE_FALLBACK for related in row}
            for item, row in similarities.items()
        }

    score_range = max_score - min_score
    return {
        item: {
            related: (score - min_score) / score_range
            for related, score in row.items()
        }
        for item, row in similarities.items()
    }


def predict_ratings(
    scaled: SimilarityMatrix,
    partition: UserItemMatrix,
) -> List[PredictedResult]:
    """Derive predicted scores from scaled similarities and user ratings.

    The last prediction computed for a target item replaces earlier ones.
    Categories are left as "unknown"; the master resolves them.
    """
    predictions: Dict[str, float] = {}
    for items in partition.values():
        for product_id, rating in items.items():
            for similar_product, similarity in scaled.get(product_id, {}).items():
                predictions[similar_product] = similarity * float(rating)

    return [
        PredictedResult(product_id=product_id, stars=stars, category=UNKNOWN_CATEGORY)
        for product_id, stars in predictions.items()
    ]


def run_engine(partition: UserItemMatrix) -> List[PredictedResult]:
    """Run the full scoring pipeline on one partition."""
    start_time = time.time()

    logger.info("Computing item similarities", extra={"num_users": len(partition)})
    similarities = compute_similarities(partition)

    logger.info("Scaling similarities", extra={"num_items": len(similarities)})
    scaled = scale_similarities(similarities)

    logger.info("Predicting scores")
    results = predict_ratings(scaled, partition)

    logger.info(
        f"Engine produced {len(results)} results",
        extra={"duration_ms": round((time.time() - start_time) * 1000, 2)},
    )
    return results
