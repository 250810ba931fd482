"""
Progress data derived from session history.

Records are expected newest-first, as returned by HistoryStore.get_all().
"""

from dataclasses import dataclass
from datetime import datetime

from .models import SessionRecord

TREND_LIMIT = 20


@dataclass(frozen=True)
class TrendPoint:
    """Set-1 weight of one hold in one session."""

    weight: float
    date: datetime
    bailed: bool
    is_pr: bool


def build_trend(
    records: list[SessionRecord],
    hold_id: str,
    workout_type: str,
    limit: int = TREND_LIMIT,
) -> list[TrendPoint]:
    """
    Up to *limit* trend points (oldest → newest) for one hold of one workout.

    Bailed sessions are kept so shortfalls stay visible.  Every point at the
    maximum weight of the window is marked as a PR.
    """
    matching = [
        r for r in records if r.workout_type == workout_type and r.find_hold(hold_id) is not None
    ]
    window = list(reversed(matching[:limit]))
    if not window:
        return []

    weights = [r.find_hold(hold_id).set1.weight for r in window]  # type: ignore[union-attr]
    best = max(weights)

    return [
        TrendPoint(
            weight=w,
            date=datetime.fromtimestamp(r.started_at / 1000),
            bailed=r.bailed,
            is_pr=w == best,
        )
        for r, w in zip(window, weights)
    ]


def compute_stats(records: list[SessionRecord]) -> dict[str, int]:
    """Headline counts for the progress screen."""
    return {
        "total_completed": sum(1 for r in records if not r.bailed),
        "total_bailed": sum(1 for r in records if r.bailed),
        "total_imported": sum(1 for r in records if r.imported),
    }
