"""Display model for the reviews widget.

Turns the widget state into ready-to-print labels: the average and count
header, the star distribution, the first few review cards and the form
status line.
"""

import math
from dataclasses import dataclass
from datetime import datetime

MAX_CARDS = 6
MIN_REVIEWS_FOR_DISTRIBUTION = 3
NO_AVERAGE = "—"


def clamp_rating(value) -> int:
    """Round to the nearest whole star and keep it within 1..5."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1
    if math.isnan(number):
        return 1
    return max(1, min(5, math.floor(number + 0.5)))


def initials(name) -> str:
    parts = str(name or "").split()[:2]
    return "".join(part[0].upper() for part in parts)


def format_date(value) -> str:
    """Format a timestamp as ``05 Mar 2025``; unparseable values give an empty string."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return ""
    if not isinstance(value, datetime):
        return ""
    return f"{value.day:02d} {value:%b} {value.year}"


def stars(value) -> str:
    full = clamp_rating(value)
    return "★" * full + "☆" * (5 - full)


def average_label(average) -> str:
    if average is None:
        return NO_AVERAGE
    return f"{average:.1f}"


def count_label(count: int) -> str:
    if not count:
        return "No reviews yet"
    return f"{count} review{'' if count == 1 else 's'}"


def placeholder(entity_name: str) -> str:
    return f"What should someone know before visiting {entity_name}?"


@dataclass(frozen=True)
class DistributionRow:
    stars: int
    count: int
    percent: int


@dataclass(frozen=True)
class ReviewCard:
    id: str
    initials: str
    display_name: str
    rating: int
    stars: str
    date: str
    body: str


@dataclass(frozen=True)
class WidgetView:
    average_label: str
    count_label: str
    distribution: list[DistributionRow]
    cards: list[ReviewCard]
    showing_note: str | None
    placeholder: str
    status: str
    status_message: str
    loading: bool
    submitting: bool
    load_failed: bool


def _distribution_rows(summary: dict) -> list[DistributionRow]:
    count = summary.get("count") or 0
    if count < MIN_REVIEWS_FOR_DISTRIBUTION:
        return []
    distribution = summary.get("distribution") or {}
    rows = []
    for score in (5, 4, 3, 2, 1):
        hits = int(distribution.get(str(score), 0))
        rows.append(DistributionRow(stars=score, count=hits, percent=math.floor(hits / count * 100 + 0.5)))
    return rows


def _card(review: dict) -> ReviewCard:
    name = str(review.get("displayName", ""))
    rating = clamp_rating(review.get("rating"))
    return ReviewCard(
        id=str(review.get("id", "")),
        initials=initials(name),
        display_name=name,
        rating=rating,
        stars=stars(rating),
        date=format_date(review.get("createdAt")),
        body=str(review.get("body", "")),
    )


def build_view(state, entity_name: str) -> WidgetView:
    summary = state.summary
    count = summary.get("count") or 0
    total = max(count, len(state.reviews))

    return WidgetView(
        average_label=average_label(summary.get("average") if count else None),
        count_label=count_label(count),
        distribution=_distribution_rows(summary),
        cards=[_card(review) for review in state.reviews[:MAX_CARDS]],
        showing_note=f"Showing {MAX_CARDS} of {total}" if total > MAX_CARDS else None,
        placeholder=placeholder(entity_name),
        status=state.status.value,
        status_message=state.status_message,
        loading=state.loading,
        submitting=state.submitting,
        load_failed=state.load_failed,
    )
