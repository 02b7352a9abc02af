"""Tests for matrix construction and partitioning."""

import random

import pytest

from src.cluster.exceptions import InvalidArgumentError
from src.cluster.matrix import build_user_item_matrix, partition_matrix
from src.cluster.models import RatingRecord


def _random_matrix(num_users: int, seed: int = 42):
    rng = random.Random(seed)
    return {
        f"user{u}": {f"p{rng.randint(1, 30)}": float(rng.randint(1, 5)) for _ in range(4)}
        for u in range(num_users)
    }


def test_build_user_item_matrix_groups_by_reviewer(sample_records):
    """Test that ratings are grouped per reviewer."""
    matrix = build_user_item_matrix(sample_records)

    assert set(matrix) == {"u1", "u2", "u3", "u4"}
    assert matrix["u1"] == {"p1": 5.0, "p2": 3.0}
    assert matrix["u4"] == {"p4": 4.0}


def test_build_user_item_matrix_later_duplicate_overwrites():
    """Test that a second rating of the same pair replaces the first."""
    records = [
        RatingRecord(reviewer_id="u1", product_id="p1", stars=2.0, category="books"),
        RatingRecord(reviewer_id="u1", product_id="p1", stars=4.0, category="books"),
    ]

    assert build_user_item_matrix(records) == {"u1": {"p1": 4.0}}


def test_build_user_item_matrix_empty():
    assert build_user_item_matrix([]) == {}


@pytest.mark.parametrize("num_partitions", [1, 2, 3, 5, 7])
def test_partition_covers_every_user_exactly_once(num_partitions):
    """Test that the union of partitions is the user set, without overlap."""
    matrix = _random_matrix(23)

    partitions = partition_matrix(matrix, num_partitions)

    assert len(partitions) == num_partitions
    seen = [user for partition in partitions for user in partition]
    assert sorted(seen) == sorted(matrix)
    assert len(seen) == len(set(seen))


def test_partition_keeps_user_rows_whole():
    """Test that a user's full item set stays in one partition."""
    matrix = _random_matrix(10)

    for partition in partition_matrix(matrix, 3):
        for user, items in partition.items():
            assert items == matrix[user]


def test_partition_is_deterministic():
    """Test that the same matrix always yields the same assignment."""
    matrix = _random_matrix(15)
    shuffled = dict(sorted(matrix.items(), key=lambda _: random.random()))

    assert partition_matrix(matrix, 4) == partition_matrix(shuffled, 4)


def test_partition_assigns_sorted_users_round_robin():
    matrix = {"c": {"p": 1.0}, "a": {"p": 2.0}, "b": {"p": 3.0}}

    partitions = partition_matrix(matrix, 2)

    assert list(partitions[0]) == ["a", "c"]
    assert list(partitions[1]) == ["b"]


def test_partition_more_slots_than_users_leaves_empty_partitions():
    partitions = partition_matrix({"u1": {"p1": 1.0}}, 3)

    assert partitions == [{"u1": {"p1": 1.0}}, {}, {}]


@pytest.mark.parametrize("num_partitions", [0, -1])
def test_partition_non_positive_count_raises(num_partitions):
    """Test that a non-positive partition count is rejected."""
    with pytest.raises(InvalidArgumentError) as exc_info:
        partition_matrix({"u1": {"p1": 1.0}}, num_partitions)

    assert exc_info.value.status_code == 400
    assert exc_info.value.details["argument"] == "num_partitions"
