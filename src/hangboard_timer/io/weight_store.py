"""
JSON storage for per-workout weight baselines.

weights.json holds one mapping per weights key (workout program):

    {"a": {"jug": {"set1": 0, "set2": 0}, ...}, "b": {...}}

Only baselines live here; session overrides are never written.
"""

import json
from pathlib import Path

from ..core.models import SetWeights
from .serializers import ValidationError, dict_to_weights, weights_to_dict


class WeightStore:
    """Reads and writes weights.json."""

    def __init__(self, weights_path: str | Path):
        self.weights_path = Path(weights_path)

    def _read_all(self) -> dict:
        if not self.weights_path.exists():
            return {}
        try:
            with open(self.weights_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.weights_path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def load(self, weights_key: str) -> dict[str, SetWeights] | None:
        """
        Load baselines for one workout.

        Returns:
            {hold_id: SetWeights}, or None if nothing is stored yet

        Raises:
            ValidationError: If the file or the mapping is malformed
        """
        raw = self._read_all().get(weights_key)
        if raw is None:
            return None
        return dict_to_weights(raw)

    def save(self, weights_key: str, weights: dict[str, SetWeights]) -> None:
        """Replace the baselines of one workout, keeping the others."""
        data = self._read_all()
        data[weights_key] = weights_to_dict(weights)
        self.weights_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.weights_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def reset(self, weights_key: str) -> None:
        """Forget stored baselines so catalog defaults apply again."""
        data = self._read_all()
        if weights_key in data:
            del data[weights_key]
            with open(self.weights_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
