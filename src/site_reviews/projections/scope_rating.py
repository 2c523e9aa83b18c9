"""ScopeRating — aggregated rating statistics for one scope."""

from dataclasses import dataclass, field

from site_reviews.review.review import RATING_MAX, RATING_MIN


def _default_distribution() -> dict[int, int]:
    return {score: 0 for score in range(RATING_MIN, RATING_MAX + 1)}


def _recalculate_average(distribution: dict[int, int]) -> float | None:
    total = sum(distribution.values())
    if total == 0:
        return None
    weighted_sum = sum(rating * count for rating, count in distribution.items())
    return round(weighted_sum / total, 2)


@dataclass(frozen=True)
class ScopeRating:
    count: int = 0
    average: float | None = None
    distribution: dict[int, int] = field(default_factory=_default_distribution)

    @classmethod
    def from_ratings(cls, ratings) -> "ScopeRating":
        distribution = _default_distribution()
        for rating in ratings:
            distribution[rating] += 1
        return cls(
            count=sum(distribution.values()),
            average=_recalculate_average(distribution),
            distribution=distribution,
        )
