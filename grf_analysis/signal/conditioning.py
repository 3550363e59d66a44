"""Baseline (sensor offset) correction, noise estimation and invalid-sample flagging."""
import logging
from typing import Optional

import numpy as np
from scipy.ndimage import uniform_filter1d

from ..config import DEFAULT_CONDITIONER_CONFIG, ConditionerConfig
from ..data.types import ConditionedSeries, ForceSeries
from ..detect.crossings import rolling_cv
from .filter import lowpass_filter

logger = logging.getLogger(__name__)


def baseline_window_size(n_samples: int, sample_rate_hz: float, config: ConditionerConfig) -> int:
    """First stable window: baseline_window_ms, or baseline_fraction of the series if shorter."""
    n_window = int(round(sample_rate_hz * config.baseline_window_ms / 1000.0))
    if n_samples < n_window or n_window <= 0:
        n_window = int(n_samples * config.baseline_fraction)
    return max(1, min(n_window, n_samples))


def windowed_noise_rms(
    total: np.ndarray,
    window: int,
    stable_window: Optional[int] = None,
    stable_cv: Optional[float] = None,
) -> float:
    """Peak RMS of total force around its centered moving average (N).

    With ``stable_cv`` set, only windows whose rolling CV over ``stable_window`` samples
    stays below it are scored, so take-off, landing and other movement transients do
    not read as noise. All windows are scored when none is stable.
    """
    if len(total) == 0:
        return 0.0
    window = max(1, min(window, len(total)))
    residual = total - uniform_filter1d(total, size=window, mode="nearest")
    rms = np.sqrt(uniform_filter1d(residual ** 2, size=window, mode="nearest"))
    if stable_cv is not None:
        stable = rolling_cv(total, stable_window or 2 * window) < stable_cv
        if np.any(stable):
            rms = rms[stable]
    return float(np.max(rms))


def condition(series: ForceSeries, config: ConditionerConfig = DEFAULT_CONDITIONER_CONFIG) -> ConditionedSeries:
    """Remove sensor offset and flag noisy or physically invalid samples.

    Offset is estimated per channel as the mean of the first stable window. It is only
    subtracted when that window is unloaded (mean total force within the zero-load
    ceiling): a loaded window holds body weight, which is a reference supplied by the
    caller and must survive conditioning. Never raises and never drops samples; series
    shorter than ``config.min_samples`` are returned unmodified with
    ``insufficient_samples`` and ``noisy`` set.
    """
    left = np.asarray(series.left, dtype=float)
    right = np.asarray(series.right, dtype=float)
    n = len(series)
    invalid = (left < -config.negative_tolerance_n) | (right < -config.negative_tolerance_n)

    if n < config.min_samples:
        logger.warning("Series has %d samples (< %d); skipping conditioning", n, config.min_samples)
        return ConditionedSeries(
            series=series,
            noisy=True,
            insufficient_samples=True,
            invalid_mask=invalid,
        )

    n_window = baseline_window_size(n, series.sample_rate_hz, config)
    baseline_left = float(np.mean(left[:n_window]))
    baseline_right = float(np.mean(right[:n_window]))
    if abs(baseline_left + baseline_right) < config.zero_load_ceiling_n:
        offset_left, offset_right = baseline_left, baseline_right
    else:
        offset_left, offset_right = 0.0, 0.0

    left_c = left - offset_left
    right_c = right - offset_right
    if config.lowpass_cutoff_hz is not None:
        left_c = lowpass_filter(left_c, series.sample_rate_hz, config.lowpass_cutoff_hz, config.lowpass_order)
        right_c = lowpass_filter(right_c, series.sample_rate_hz, config.lowpass_cutoff_hz, config.lowpass_order)

    noise = windowed_noise_rms(
        left_c + right_c,
        config.noise_window_samples,
        config.noise_stable_window_samples,
        config.noise_stable_cv,
    )
    noisy = noise > config.noise_ceiling_n
    if noisy:
        logger.warning("Peak windowed noise %.1f N exceeds ceiling %.1f N", noise, config.noise_ceiling_n)
    logger.debug(
        "Conditioned %d samples: offsets L=%.2f N R=%.2f N, noise=%.2f N, invalid=%d",
        n, offset_left, offset_right, noise, int(np.count_nonzero(invalid)),
    )

    return ConditionedSeries(
        series=series.with_channels(left_c, right_c),
        noisy=bool(noisy),
        insufficient_samples=False,
        noise_level_n=noise,
        baseline_left_n=baseline_left,
        baseline_right_n=baseline_right,
        offset_left_n=offset_left,
        offset_right_n=offset_right,
        invalid_mask=invalid,
    )
