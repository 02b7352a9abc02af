"""Data models shared by the master, the workers and the API.

Rating records and results are pydantic models so the same definitions
validate CSV rows, wire payloads and API responses.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

# Category used when a product has no known category
UNKNOWN_CATEGORY = "unknown"

# Sparse user -> item -> rating structure; a Partition has the same shape
UserItemMatrix = Dict[str, Dict[str, float]]

# Item -> co-occurring item -> score
SimilarityMatrix = Dict[str, Dict[str, float]]


class RatingRecord(BaseModel):
    """A single parsed rating.

    Attributes:
        reviewer_id: Identifier of the user who rated the product.
        product_id: Identifier of the rated product.
        stars: Rating value.
        category: Product category.
    """

    model_config = ConfigDict(frozen=True)

    reviewer_id: str
    product_id: str
    stars: float
    category: str


class PredictedResult(BaseModel):
    """Score predicted by one worker for one target product."""

    product_id: str = Field(..., description="Target product identifier")
    stars: float = Field(..., description="Predicted score")
    category: str = Field(default=UNKNOWN_CATEGORY, description="Product category")


class AggregatedResult(BaseModel):
    """Score of one product averaged across all responding workers."""

    product_id: str = Field(..., description="Product identifier")
    stars: float = Field(..., description="Mean of the contributed scores")
    category: str = Field(default=UNKNOWN_CATEGORY, description="Product category")


class DispatchReport(BaseModel):
    """Outcome of one dispatch batch.

    Attributes:
        partitions_total: Number of partitions produced (one per configured worker).
        workers_available: Number of workers that answered the probe.
        dispatched: Number of partitions actually sent to a worker.
        succeeded: Number of partitions whose results were merged.
        failed_workers: Addresses whose exchange failed.
        skipped_workers: Configured addresses skipped because they were unavailable.
    """

    partitions_total: int = 0
    workers_available: int = 0
    dispatched: int = 0
    succeeded: int = 0
    failed_workers: List[str] = Field(default_factory=list)
    skipped_workers: List[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every partition was processed successfully."""
        return self.succeeded == self.partitions_total


class RecommendationEnvelope(BaseModel):
    """Final ranked results of a request cycle with completeness counters."""

    results: List[AggregatedResult] = Field(default_factory=list)
    partitions_total: int = Field(default=0, description="Partitions produced")
    partitions_succeeded: int = Field(default=0, description="Partitions merged")
    workers_available: int = Field(default=0, description="Workers that answered the probe")
    complete: bool = Field(default=False, description="True if no partition was lost")


class RecommendationRequest(BaseModel):
    """Categories to score and how many ranked results to return."""

    categories: List[str] = Field(..., description="Selected product categories")
    max_results: int = Field(..., ge=0, description="Maximum number of results")
