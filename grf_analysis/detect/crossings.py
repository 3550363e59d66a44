"""Sustained threshold crossings and rolling stability statistics on a force trace."""
from typing import Optional, Tuple

import numpy as np
from scipy.ndimage import uniform_filter1d


def dwell_samples(dwell_ms: float, sample_rate_hz: float) -> int:
    """Number of samples a condition must hold for; at least one."""
    return max(1, int(np.ceil(sample_rate_hz * dwell_ms / 1000.0)))


def first_sustained(mask: np.ndarray, start: int, dwell: int, stop: Optional[int] = None) -> Optional[int]:
    """First index i >= start with mask[i:i + dwell] all True, or None.

    A crossing that cannot be confirmed for the full dwell before ``stop`` is rejected,
    so single-sample glitches never count as a transition.
    """
    n = len(mask)
    stop = n if stop is None else min(stop, n)
    start = max(0, start)
    seg = np.asarray(mask[start:stop], dtype=np.int32)
    if len(seg) < dwell:
        return None
    counts = np.convolve(seg, np.ones(dwell, dtype=np.int32), mode="valid")
    hits = np.flatnonzero(counts == dwell)
    if hits.size == 0:
        return None
    return start + int(hits[0])


def rolling_mean_std(force: np.ndarray, window: int) -> Tuple[np.ndarray, np.ndarray]:
    """Centered moving mean and standard deviation (edges use nearest-value padding)."""
    force = np.asarray(force, dtype=float)
    window = max(1, min(window, len(force)))
    mean = uniform_filter1d(force, size=window, mode="nearest")
    mean_sq = uniform_filter1d(force ** 2, size=window, mode="nearest")
    std = np.sqrt(np.maximum(mean_sq - mean ** 2, 0.0))
    return mean, std


def rolling_cv(force: np.ndarray, window: int) -> np.ndarray:
    """Centered coefficient of variation; inf where the window mean is not positive."""
    mean, std = rolling_mean_std(force, window)
    cv = np.full(len(mean), np.inf)
    pos = mean > 0
    cv[pos] = std[pos] / mean[pos]
    return cv


def count_sustained_drops(force: np.ndarray, threshold: float, dwell: int) -> int:
    """Count descending crossings of ``threshold`` that then stay below it for ``dwell`` samples."""
    below = np.asarray(force) < threshold
    n = len(below)
    count = 0
    for i in np.flatnonzero(below[1:] & ~below[:-1]) + 1:
        if i + dwell <= n and np.all(below[i : i + dwell]):
            count += 1
    return count
