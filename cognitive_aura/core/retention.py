"""
Retention Formulas.

Shared memory-retention estimates used by both the composite score
(retention and urgency factors) and target selection (forgetting risk).

Two memory models are supported:
- FSRS stability (days): log-scaled against a one-year horizon
- Legacy SM-2 ease factor + interval: normalized ease plus an interval bonus
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

# SM-2 ease factor bounds
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 4.0

# One year of stability counts as full retention
RETENTION_HORIZON_DAYS = 365.0

SECONDS_PER_DAY = 86400.0


def clamp01(value: float) -> float:
    """Clamp a value to [0, 1]."""
    return max(0.0, min(1.0, value))


def stability_retention(stability_days: float) -> float:
    """
    Retention strength from FSRS stability.

    Formula: R = min(1, ln(S + 1) / ln(365))

    Args:
        stability_days: FSRS stability (must be > 0)

    Returns:
        Retention estimate between 0 and 1
    """
    return min(1.0, math.log(stability_days + 1) / math.log(RETENTION_HORIZON_DAYS))


def legacy_retention(ease_factor: float, interval_days: float) -> float:
    """
    Retention estimate for legacy SM-2 items.

    Normalizes the ease factor over [1.3, 4.0] and adds up to 0.5
    for the current interval (a one-year interval earns the full bonus).
    """
    normalized_ease = (ease_factor - MIN_EASE_FACTOR) / (MAX_EASE_FACTOR - MIN_EASE_FACTOR)
    interval_bonus = min(0.5, interval_days / RETENTION_HORIZON_DAYS)
    return clamp01(normalized_ease + interval_bonus)


def estimate_retention(
    stability: float | None,
    ease_factor: float | None,
    interval_days: float | None,
) -> float | None:
    """
    Estimate retention from whichever memory model is available.

    Stability wins when positive; otherwise both legacy fields are needed.

    Returns:
        Retention in [0, 1], or None when the item carries no memory data
    """
    if stability is not None and stability > 0:
        return stability_retention(stability)
    if ease_factor and interval_days:
        return legacy_retention(ease_factor, interval_days)
    return None


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so naive and aware values compare."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def days_between(earlier: datetime | None, later: datetime) -> float:
    """
    Days elapsed from earlier to later (negative if earlier is in the future).

    A missing timestamp is treated as the Unix epoch, i.e. long overdue.
    """
    if earlier is None:
        earlier = datetime.fromtimestamp(0, UTC)
    delta = as_utc(later) - as_utc(earlier)
    return delta.total_seconds() / SECONDS_PER_DAY
