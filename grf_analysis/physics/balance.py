"""Centre-of-pressure sway metrics from the two platforms' COP and vertical load."""
from typing import Dict, Optional

import numpy as np

from ..data.types import ConditionedSeries


def _weighted_side(cop: Optional[np.ndarray], grf: np.ndarray) -> np.ndarray:
    """cop * grf per sample; an unloaded side contributes zero even without a COP reading."""
    if cop is None:
        cop = np.full((len(grf), 2), np.nan)
    weighted = cop * grf[:, None]
    weighted[grf == 0] = 0.0
    return weighted


def combined_cop(conditioned: ConditionedSeries) -> np.ndarray:
    """Load-weighted combined COP (n, 2) in mm; NaN where total load is not positive or a loaded side has no COP."""
    series = conditioned.series
    n = len(series)
    if not series.has_cop:
        return np.full((n, 2), np.nan)
    left = np.asarray(series.left, dtype=float)
    right = np.asarray(series.right, dtype=float)
    total = left + right
    numerator = _weighted_side(series.left_cop, left) + _weighted_side(series.right_cop, right)
    cop = np.full((n, 2), np.nan)
    loaded = total > 0
    cop[loaded] = numerator[loaded] / total[loaded, None]
    return cop


def compute_cop_metrics(conditioned: ConditionedSeries, window: slice) -> Dict[str, float]:
    """Range, area, path length, velocity and stability index of the combined COP over ``window``.

    Samples with undefined COP are skipped. Returns an empty dict when fewer than two
    samples have a defined COP.
    """
    cop = combined_cop(conditioned)[window]
    cop = cop[np.all(np.isfinite(cop), axis=1)]
    if len(cop) < 2:
        return {}

    x = cop[:, 0]
    y = cop[:, 1]
    dx = np.diff(x)
    dy = np.diff(y)
    range_x = float(np.max(x) - np.min(x))
    range_y = float(np.max(y) - np.min(y))
    path_length = float(np.sum(np.hypot(dx, dy)))

    start, stop, _ = window.indices(len(conditioned))
    duration_s = (stop - start) / conditioned.sample_rate_hz

    out: Dict[str, float] = {
        "cop_range_x_mm": range_x,
        "cop_range_y_mm": range_y,
        "cop_range_mm": float(np.hypot(range_x, range_y)),
        "cop_area_mm2": range_x * range_y,
        "cop_path_length_mm": path_length,
        "mean_cop_x_mm": float(np.mean(x)),
        "mean_cop_y_mm": float(np.mean(y)),
        "stability_index_mm": float(np.sqrt(np.var(x) + np.var(y))),
    }
    if duration_s > 0:
        out["cop_velocity_mm_s"] = path_length / duration_s
        out["cop_velocity_x_mm_s"] = float(np.sum(np.abs(dx))) / duration_s
        out["cop_velocity_y_mm_s"] = float(np.sum(np.abs(dy))) / duration_s
    return out
