"""Zero-phase low-pass filtering for force channels."""
import numpy as np
from scipy.signal import butter, filtfilt


def lowpass_filter(signal: np.ndarray, sample_rate_hz: float, cutoff_hz: float, order: int = 4) -> np.ndarray:
    """Zero-phase Butterworth low-pass.

    Returns a copy of the input when the cutoff is at or above Nyquist or the signal is
    too short for filtfilt's edge padding.
    """
    signal = np.asarray(signal, dtype=float)
    normal_cutoff = cutoff_hz / (0.5 * sample_rate_hz)
    if normal_cutoff >= 1.0 or normal_cutoff <= 0.0:
        return signal.copy()
    b, a = butter(order, normal_cutoff, btype="low", analog=False)
    if len(signal) <= 3 * max(len(a), len(b)):
        return signal.copy()
    return filtfilt(b, a, signal)
