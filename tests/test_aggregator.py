"""Tests for aggregation of worker results."""

import pytest

from src.cluster.aggregator import aggregate_scores
from src.cluster.exceptions import InvalidArgumentError


def test_aggregate_scores_averages_contributions():
    """Test that contributions [10.0, 20.0] average to 15.0."""
    results = aggregate_scores({"p2": [10.0, 20.0]}, {"p2": "books"}, 5)

    assert len(results) == 1
    assert results[0].product_id == "p2"
    assert results[0].stars == 15.0
    assert results[0].category == "books"


def test_aggregate_scores_unknown_category_default():
    results = aggregate_scores({"p9": [1.0]}, {"p2": "books"}, 5)

    assert results[0].category == "unknown"


def test_aggregate_scores_sorted_descending_with_product_id_tiebreak():
    """Test that equal scores are ordered by product_id."""
    scores = {"c": [2.0], "a": [2.0], "b": [5.0], "d": [1.0, 3.0]}

    results = aggregate_scores(scores, {}, 10)

    assert [r.product_id for r in results] == ["b", "a", "c", "d"]


def test_aggregate_scores_truncates_to_max_results():
    scores = {f"p{i}": [float(i)] for i in range(10)}

    results = aggregate_scores(scores, {}, 3)

    assert [r.product_id for r in results] == ["p9", "p8", "p7"]


def test_aggregate_scores_clamps_max_results():
    results = aggregate_scores({"p1": [1.0], "p2": [2.0]}, {}, 50)

    assert len(results) == 2


def test_aggregate_scores_zero_max_results():
    assert aggregate_scores({"p1": [1.0]}, {}, 0) == []


def test_aggregate_scores_empty_input():
    """Test that no contributions at all give an empty list, not an error."""
    assert aggregate_scores({}, {"p1": "books"}, 5) == []


def test_aggregate_scores_negative_max_results_raises():
    with pytest.raises(InvalidArgumentError):
        aggregate_scores({"p1": [1.0]}, {}, -1)
