"""User-item matrix construction and partitioning."""

import logging
from typing import Iterable, List

from src.cluster.exceptions import InvalidArgumentError
from src.cluster.models import RatingRecord, UserItemMatrix

# Configure module logger
logger = logging.getLogger(__name__)


def build_user_item_matrix(records: Iterable[RatingRecord]) -> UserItemMatrix:
    """Build the sparse user -> item -> rating structure.

    A later rating of the same (user, item) pair overwrites the earlier one.

    Args:
        records: Rating records, usually already filtered by category.

    Returns:
        Dictionary mapping reviewer_id to a dictionary of product_id -> stars.
    """
    matrix: UserItemMatrix = {}
    for record in records:
        matrix.setdefault(record.reviewer_id, {})[record.product_id] = record.stars

    logger.info(
        "User-item matrix built",
        extra={
            "num_users": len(matrix),
            "num_ratings": sum(len(items) for items in matrix.values()),
        },
    )
    return matrix


def partition_matrix(matrix: UserItemMatrix, num_partitions: int) -> List[UserItemMatrix]:
    """Split the matrix into disjoint, user-complete partitions.

    Users are sorted by id and dealt round-robin, so the assignment is
    reproducible for a given matrix and partition count. A user's row is
    never split between partitions.

    Args:
        matrix: Full user-item matrix.
        num_partitions: Number of partitions to produce, one per worker slot.

    Returns:
        List of exactly num_partitions partitions; some may be empty when
        there are fewer users than partitions.

    Raises:
        InvalidArgumentError: If num_partitions is not positive.

    Example:
        >>> parts = partition_matrix({"u1": {"p1": 5.0}, "u2": {"p2": 3.0}}, 2)
        >>> [sorted(p) for p in parts]
        [['u1'], ['u2']]
    """
    if num_partitions <= 0:
        raise InvalidArgumentError(
            "num_partitions", num_partitions, "must be a positive integer"
        )

    partitions: List[UserItemMatrix] = [{} for _ in range(num_partitions)]
    for index, user_id in enumerate(sorted(matrix)):
        partitions[index % num_partitions][user_id] = dict(matrix[user_id])

    logger.debug(
        f"Partitioned {len(matrix)} users into {num_partitions} partitions: "
        f"{[len(p) for p in partitions]}"
    )
    return partitions
