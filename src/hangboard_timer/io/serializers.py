"""
JSON serialization for history records and stored weights.

Handles conversion between dataclasses and JSON-compatible dicts.  Every
field written by record_to_dict() is read back identically by
dict_to_record(), so exported history can be imported again.
"""

import json
from typing import Any, Iterable

from ..core.models import HoldRecord, SessionRecord, SetRecord, SetWeights


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_number(value: Any, name: str) -> float:
    """
    Validate that a value is a JSON number (bools rejected).

    Raises:
        ValidationError: If value is not numeric
    """
    if not _is_number(value):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    return value


def validate_non_negative(value: Any, name: str) -> float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is negative or not numeric
    """
    validate_number(value, name)
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false, got {value!r}")
    return value


def validate_str(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string, got {value!r}")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string, got {value!r}")
    return value


def set_record_to_dict(s: SetRecord) -> dict[str, Any]:
    return {"weight": s.weight, "reps": s.reps, "completed": s.completed}


def dict_to_set_record(data: Any, name: str = "set") -> SetRecord:
    """
    Convert dict to SetRecord.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"{name} must be an object, got {data!r}")
    weight = validate_number(data.get("weight"), f"{name}.weight")
    reps = validate_non_negative(data.get("reps"), f"{name}.reps")
    completed = validate_bool(data.get("completed"), f"{name}.completed")
    return SetRecord(weight=float(weight), reps=int(reps), completed=completed)


def hold_record_to_dict(h: HoldRecord) -> dict[str, Any]:
    d: dict[str, Any] = {
        "hold_id": h.hold_id,
        "hold_name": h.hold_name,
        "set1": set_record_to_dict(h.set1),
        "set2": set_record_to_dict(h.set2) if h.set2 is not None else None,
    }
    if h.notes:
        d["notes"] = h.notes
    return d


def dict_to_hold_record(data: Any) -> HoldRecord:
    """
    Convert dict to HoldRecord.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"hold must be an object, got {data!r}")
    hold_id = validate_str(data.get("hold_id"), "hold_id")
    set2_raw = data.get("set2")
    return HoldRecord(
        hold_id=hold_id,
        hold_name=str(data.get("hold_name") or hold_id),
        set1=dict_to_set_record(data.get("set1"), f"{hold_id}.set1"),
        set2=dict_to_set_record(set2_raw, f"{hold_id}.set2") if set2_raw is not None else None,
        notes=_optional_str(data, "notes"),
    )


def record_to_dict(record: SessionRecord) -> dict[str, Any]:
    """
    Convert SessionRecord to JSON-compatible dict.

    Optional fields (notes, imported) are only written when set.
    """
    d: dict[str, Any] = {
        "id": record.id,
        "workout_type": record.workout_type,
        "started_at": record.started_at,
        "completed_at": record.completed_at,
        "bailed": record.bailed,
        "holds": [hold_record_to_dict(h) for h in record.holds],
    }
    if record.notes:
        d["notes"] = record.notes
    if record.imported:
        d["imported"] = True
    return d


def dict_to_record(data: Any, workout_types: Iterable[str] | None = None) -> SessionRecord:
    """
    Convert dict to SessionRecord.

    Args:
        data: Dict representation
        workout_types: If given, workout_type must be one of these

    Returns:
        SessionRecord instance

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Record must be an object, got {type(data).__name__}")

    record_id = validate_str(data.get("id"), "id")
    workout_type = validate_str(data.get("workout_type"), "workout_type")
    if workout_types is not None:
        allowed = set(workout_types)
        if workout_type not in allowed:
            raise ValidationError(
                f"Unknown workout_type '{workout_type}'. Must be one of {sorted(allowed)}"
            )

    started_at = validate_non_negative(data.get("started_at"), "started_at")
    completed_at = validate_non_negative(data.get("completed_at", started_at), "completed_at")

    holds_raw = data.get("holds")
    if not isinstance(holds_raw, list):
        raise ValidationError("holds must be a list")

    try:
        return SessionRecord(
            id=record_id,
            workout_type=workout_type,
            started_at=int(started_at),
            completed_at=int(completed_at),
            bailed=validate_bool(data.get("bailed", False), "bailed"),
            holds=tuple(dict_to_hold_record(h) for h in holds_raw),
            notes=_optional_str(data, "notes"),
            imported=validate_bool(data.get("imported", False), "imported"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def record_to_json_line(record: SessionRecord) -> str:
    """
    Serialize a record to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(record_to_dict(record), separators=(",", ":"))


def json_line_to_record(line: str) -> SessionRecord:
    """
    Deserialize a JSON line to a SessionRecord.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_record(data)


def weights_to_dict(weights: dict[str, SetWeights]) -> dict[str, dict[str, float]]:
    return {hold_id: {"set1": w.set1, "set2": w.set2} for hold_id, w in weights.items()}


def dict_to_weights(data: Any) -> dict[str, SetWeights]:
    """
    Convert {hold_id: {"set1": x, "set2": y}} to SetWeights.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("weights must be an object")
    result: dict[str, SetWeights] = {}
    for hold_id, pair in data.items():
        if not isinstance(pair, dict):
            raise ValidationError(f"weights[{hold_id!r}] must be an object")
        result[hold_id] = SetWeights(
            set1=float(validate_number(pair.get("set1", 0.0), f"{hold_id}.set1")),
            set2=float(validate_number(pair.get("set2", 0.0), f"{hold_id}.set2")),
        )
    return result
