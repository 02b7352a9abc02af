"""Generate fake product reviews for testing and development.

This module creates a synthetic reviews CSV in the format read by the
master: reviewer_id, product_id, stars, product_category. Each product
belongs to one category.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_reviews
        df = generate_fake_reviews(num_reviewers=100, num_products=200)
"""

import argparse
import random
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_REVIEWERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_REVIEWS = 1000
DEFAULT_CATEGORIES = ["electronics", "books", "home", "toys"]
DEFAULT_OUTPUT = "data/amazon_reviews_cleaned.csv"


def generate_fake_reviews(
    num_reviewers: int = DEFAULT_NUM_REVIEWERS,
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_reviews: int = DEFAULT_NUM_REVIEWS,
    categories: Optional[List[str]] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate synthetic star ratings.

    Args:
        num_reviewers: Number of unique reviewers. Must be positive.
        num_products: Number of unique products. Must be positive.
        num_reviews: Total number of review rows. Must be positive.
        categories: Categories products are drawn from.
        seed: Optional random seed for reproducibility.

    Returns:
        A pandas DataFrame with the columns reviewer_id, product_id,
        stars (1-5) and product_category.

    Raises:
        ValueError: If any numeric parameter is non-positive or no category
            is given.
    """
    if num_reviewers <= 0 or num_products <= 0 or num_reviews <= 0:
        raise ValueError(
            "num_reviewers, num_products, and num_reviews must be positive"
        )
    if categories is None:
        categories = DEFAULT_CATEGORIES
    if not categories:
        raise ValueError("At least one category is required")

    rng = random.Random(seed)
    product_categories = {
        f"P{product:05d}": rng.choice(categories)
        for product in range(1, num_products + 1)
    }
    product_ids = list(product_categories)

    reviews = []
    for _ in range(num_reviews):
        product_id = rng.choice(product_ids)
        reviews.append({
            "reviewer_id": f"R{rng.randint(1, num_reviewers):05d}",
            "product_id": product_id,
            "stars": float(rng.randint(1, 5)),
            "product_category": product_categories[product_id],
        })

    return pd.DataFrame(reviews)


def main() -> None:
    """Generate reviews and save them as CSV."""
    parser = argparse.ArgumentParser(description="Generate a fake reviews CSV")
    parser.add_argument("--reviewers", type=int, default=DEFAULT_NUM_REVIEWERS)
    parser.add_argument("--products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--reviews", type=int, default=DEFAULT_NUM_REVIEWS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--output",
        type=str,
        default=str(Path(__file__).parent.parent / DEFAULT_OUTPUT),
        help=f"Output CSV path (default: {DEFAULT_OUTPUT})",
    )
    args = parser.parse_args()

    print(f"Generating {args.reviews} fake reviews...")
    print(f"Reviewers: {args.reviewers}, Products: {args.products}")

    try:
        df = generate_fake_reviews(
            num_reviewers=args.reviewers,
            num_products=args.products,
            num_reviews=args.reviews,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {output_path}")
    print(f"\nData summary:")
    print(f"  Total reviews: {len(df)}")
    print(f"  Unique reviewers: {df['reviewer_id'].nunique()}")
    print(f"  Unique products: {df['product_id'].nunique()}")
    print(f"  Reviews per category:")
    for category, count in df["product_category"].value_counts().items():
        print(f"    {category}: {count}")


if __name__ == "__main__":
    main()
