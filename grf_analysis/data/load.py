"""Load decoded force captures (JSON exports or in-memory dicts) into ForceSeries."""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from ..errors import InputValidationError
from .types import ForceSeries

REQUIRED_KEYS = {"left_force", "right_force"}


def _cop_array(values: Any, n: int, name: str) -> Optional[np.ndarray]:
    if values is None:
        return None
    rows = [(np.nan, np.nan) if v is None else (float(v[0]), float(v[1])) for v in values]
    if len(rows) != n:
        raise InputValidationError(f"{name} length {len(rows)} != sample count {n}")
    return np.asarray(rows, dtype=float).reshape(n, 2)


def load_series_from_dict(data: Dict[str, Any]) -> ForceSeries:
    """Build a ForceSeries from an in-memory dict (e.g. from an API request).

    Args:
        data: Dict with left_force and right_force (N) and either sample_rate (Hz) or
              test_duration (s). Optional: timestamps_ms, left_cop, right_cop (lists of
              [x, y] in mm or null per sample).

    Returns:
        ForceSeries with read-only arrays. Timestamps are synthesized from the sample
        rate when absent.

    Raises:
        InputValidationError: If required keys are missing or array lengths mismatch.
    """
    missing = REQUIRED_KEYS - set(data.keys())
    if "sample_rate" not in data and "test_duration" not in data:
        missing = missing | {"sample_rate"}
    if missing:
        raise InputValidationError(f"Missing required keys: {sorted(missing)}")

    left = np.asarray(data["left_force"], dtype=float)
    right = np.asarray(data["right_force"], dtype=float)
    n = len(left)
    if len(right) != n:
        raise InputValidationError(f"right_force length {len(right)} != left_force length {n}")

    if "sample_rate" in data:
        sample_rate = float(data["sample_rate"])
    else:
        test_duration = float(data["test_duration"])
        if test_duration <= 0:
            raise InputValidationError(f"test_duration must be > 0, got {test_duration}")
        sample_rate = n / test_duration

    if data.get("timestamps_ms") is not None:
        timestamps = np.asarray(data["timestamps_ms"], dtype=np.int64)
        if len(timestamps) != n:
            raise InputValidationError(f"timestamps_ms length {len(timestamps)} != sample count {n}")
    elif sample_rate > 0:
        timestamps = np.round(np.arange(n) * 1000.0 / sample_rate).astype(np.int64)
    else:
        raise InputValidationError(f"sample_rate must be > 0, got {sample_rate}")

    return ForceSeries(
        timestamps_ms=timestamps,
        left=left,
        right=right,
        sample_rate_hz=sample_rate,
        left_cop=_cop_array(data.get("left_cop"), n, "left_cop"),
        right_cop=_cop_array(data.get("right_cop"), n, "right_cop"),
    )


def load_series(path: Union[str, Path]) -> ForceSeries:
    """Load a single JSON capture and return a ForceSeries.

    Raises:
        FileNotFoundError: If path does not exist.
        InputValidationError: If required keys are missing or array lengths mismatch.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return load_series_from_dict(data)
