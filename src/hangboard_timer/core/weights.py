"""
Weight model: persisted baselines plus session-only overrides.

Resolution order for the weight shown and recorded for a set:

    1. session override for (hold, set) if set
    2. stored baseline for (hold, set) if present
    3. the hold definition's default weight for that set
    4. 0.0 (bodyweight) for an unknown hold id

Overrides are for last-minute changes inside one session; baselines carry
progression decisions forward to the next session.  Deltas are added as
given: no rounding, no clamping.
"""

from __future__ import annotations

from typing import Iterable

from .holds.base import HoldDefinition
from .models import SessionOverride, SetWeights


def default_weights(holds: Iterable[HoldDefinition]) -> dict[str, SetWeights]:
    """Baselines seeded from the catalog defaults."""
    return {
        h.hold_id: SetWeights(set1=h.default_set1_weight, set2=h.default_set2_weight)
        for h in holds
    }


class WeightModel:
    """Owns StoredWeights and SessionOverrides for one workout."""

    def __init__(
        self,
        holds: Iterable[HoldDefinition],
        stored: dict[str, SetWeights] | None = None,
    ):
        self._holds = {h.hold_id: h for h in holds}
        self._stored: dict[str, SetWeights] = default_weights(self._holds.values())
        if stored:
            for hold_id, w in stored.items():
                self._stored[hold_id] = SetWeights(set1=w.set1, set2=w.set2)
        self._overrides: dict[str, SessionOverride] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def stored(self) -> dict[str, SetWeights]:
        """Copy of the persisted baselines."""
        return {k: SetWeights(set1=v.set1, set2=v.set2) for k, v in self._stored.items()}

    @property
    def overrides(self) -> dict[str, SessionOverride]:
        """Copy of the session overrides."""
        return {k: SessionOverride(set1=v.set1, set2=v.set2) for k, v in self._overrides.items()}

    def baseline_weight(self, hold_id: str, set_number: int) -> float:
        """Stored weight, else catalog default, else 0.0."""
        stored = self._stored.get(hold_id)
        if stored is not None:
            return stored.get(set_number)
        hold = self._holds.get(hold_id)
        return hold.default_weight(set_number) if hold is not None else 0.0

    def effective_weight(self, hold_id: str, set_number: int) -> float:
        """Weight to display/record: override, then baseline."""
        override = self._overrides.get(hold_id)
        if override is not None:
            value = override.get(set_number)
            if value is not None:
                return value
        return self.baseline_weight(hold_id, set_number)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_session_override(self, hold_id: str, set_number: int, delta: float) -> float:
        """
        Shift this session's weight for (hold, set) by *delta*.

        The stored baseline is not touched.

        Returns:
            The new effective weight
        """
        value = self.effective_weight(hold_id, set_number) + delta
        self._overrides.setdefault(hold_id, SessionOverride()).put(set_number, value)
        return value

    def adjust_next_weight(self, hold_id: str, set_number: int, delta: float) -> float:
        """
        Shift the stored baseline for (hold, set) by *delta*.

        Returns:
            The new baseline
        """
        if hold_id not in self._stored:
            self._stored[hold_id] = SetWeights(
                set1=self.baseline_weight(hold_id, 1),
                set2=self.baseline_weight(hold_id, 2),
            )
        self._stored[hold_id].add(set_number, delta)
        return self._stored[hold_id].get(set_number)

    def adjust_base_weight(self, hold_id: str, delta: float) -> None:
        """End-of-hold progression: move both set baselines by *delta*."""
        self.adjust_next_weight(hold_id, 1, delta)
        self.adjust_next_weight(hold_id, 2, delta)

    def adjust_set2_for_session(self, hold_id: str, delta: float) -> float:
        """
        Between-sets change of the upcoming set 2.

        Applies to today's set 2 and to the stored set-2 baseline.  Today's
        weight moves by *delta* once, from what it was before the change.

        Returns:
            The new effective set-2 weight
        """
        value = self.effective_weight(hold_id, 2) + delta
        self.adjust_next_weight(hold_id, 2, delta)
        self._overrides.setdefault(hold_id, SessionOverride()).put(2, value)
        return value

    def clear_overrides(self) -> None:
        self._overrides = {}

    def reset_weights(self) -> None:
        """Restore catalog defaults for every hold (overrides are kept)."""
        self._stored = default_weights(self._holds.values())
