"""Fail-fast parameter validation run before any phase or metric work."""
import numpy as np

from ..errors import InputValidationError
from .types import ConditionedSeries, ForceSeries


def validate_series(series: ForceSeries) -> None:
    """Raise InputValidationError for an empty series, bad rate, non-finite forces or unordered timestamps."""
    if len(series) == 0:
        raise InputValidationError("Force series is empty")
    if not np.isfinite(series.sample_rate_hz) or series.sample_rate_hz <= 0:
        raise InputValidationError(f"sample_rate_hz must be > 0, got {series.sample_rate_hz}")
    if not (np.all(np.isfinite(series.left)) and np.all(np.isfinite(series.right))):
        raise InputValidationError("Force channels contain NaN or infinite values")
    if len(series) > 1 and np.any(np.diff(series.timestamps_ms) <= 0):
        raise InputValidationError("Timestamps must be strictly increasing")


def validate_inputs(series, body_weight_n: float) -> None:
    """Validate a raw or conditioned series together with the body-weight reference."""
    if isinstance(series, ConditionedSeries):
        series = series.series
    validate_series(series)
    if body_weight_n is None or not np.isfinite(body_weight_n) or body_weight_n <= 0:
        raise InputValidationError(f"body_weight_n must be > 0, got {body_weight_n}")
