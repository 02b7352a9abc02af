"""Loading of the ratings dataset.

Reads the cleaned reviews CSV into RatingRecords and builds the
product -> category lookup used when aggregating worker results.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from src.cluster.exceptions import DatasetError
from src.cluster.models import RatingRecord

# Configure module logger
logger = logging.getLogger(__name__)

# Expected CSV columns
REVIEWER_COL = "reviewer_id"
PRODUCT_COL = "product_id"
STARS_COL = "stars"
CATEGORY_COL = "product_category"
REQUIRED_COLUMNS = (REVIEWER_COL, PRODUCT_COL, STARS_COL, CATEGORY_COL)


def load_ratings(csv_path: str) -> Tuple[List[RatingRecord], Dict[str, str]]:
    """Load rating records and the category lookup from a CSV file.

    Rows keep the file order. Star values that cannot be parsed as numbers
    are read as 0.0. The category lookup is built from the full dataset, the
    last row of a product deciding its category.

    Args:
        csv_path: Path to a CSV file with columns reviewer_id, product_id,
            stars and product_category.

    Returns:
        A tuple containing:
            - Ordered list of RatingRecord
            - Dictionary mapping product_id to category

    Raises:
        DatasetError: If the file does not exist or required columns are missing.

    Example:
        >>> records, categories = load_ratings("data/amazon_reviews_cleaned.csv")
        >>> print(f"Loaded {len(records)} ratings")
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise DatasetError(csv_path, "file not found")

    logger.info(f"Loading ratings from {csv_path}")
    df = pd.read_csv(csv_file, dtype=str, keep_default_na=False)

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise DatasetError(csv_path, f"missing required columns: {sorted(missing)}")

    stars = pd.to_numeric(df[STARS_COL], errors="coerce").fillna(0.0)

    records = [
        RatingRecord(
            reviewer_id=reviewer_id,
            product_id=product_id,
            stars=float(star),
            category=category,
        )
        for reviewer_id, product_id, star, category in zip(
            df[REVIEWER_COL], df[PRODUCT_COL], stars, df[CATEGORY_COL]
        )
    ]
    category_lookup = build_category_lookup(records)

    logger.info(
        "Ratings loaded",
        extra={
            "num_records": len(records),
            "num_products": len(category_lookup),
        },
    )
    return records, category_lookup


def build_category_lookup(records: Iterable[RatingRecord]) -> Dict[str, str]:
    """Map each product to its category; later records overwrite earlier ones."""
    return {record.product_id: record.category for record in records}


def filter_by_categories(
    records: Iterable[RatingRecord],
    categories: Iterable[str],
) -> List[RatingRecord]:
    """Keep the records whose category is one of the selected categories."""
    selected = set(categories)
    filtered = [record for record in records if record.category in selected]
    logger.debug(
        f"Filtered {len(filtered)} records for categories {sorted(selected)}"
    )
    return filtered
