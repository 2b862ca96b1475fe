"""Scoring models: range criteria and weighted aggregation results."""

from pydantic import BaseModel, ConfigDict, Field

MIN_SCORE = 1
MAX_SCORE = 5


class ScoringRange(BaseModel):
    """Closed value interval mapped to a score."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(..., description="Lower bound (inclusive)")
    max: float = Field(..., description="Upper bound (inclusive)")
    score: int = Field(..., description="Score for values in this range (1-5)")

    def contains(self, value: float) -> bool:
        """Check if value lies inside this range."""
        return self.min <= value <= self.max


class ScoringCriteria(BaseModel):
    """Set of scoring ranges for one KPI."""

    model_config = ConfigDict(frozen=True)

    ranges: list[ScoringRange] = Field(default_factory=list)

    def sorted_ranges(self) -> list[ScoringRange]:
        """Get ranges ordered by lower bound."""
        return sorted(self.ranges, key=lambda r: (r.min, r.max))


class WeightedScore(BaseModel):
    """A score and the weight of the KPI it belongs to."""

    score: int
    weight: float


class WeightedAggregate(BaseModel):
    """Result of aggregating several weighted scores."""

    total_weighted: float
    max_possible: float
    percentage: float
