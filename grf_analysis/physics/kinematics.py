"""Centre-of-mass velocity/displacement from force, and smoothed rate of force development."""
import numpy as np
from scipy.integrate import cumulative_trapezoid
from scipy.signal import savgol_filter

G = 9.81


def body_mass(bodyweight: float) -> float:
    return bodyweight / G


def compute_velocity(
    force: np.ndarray,
    bodyweight: float,
    sample_rate_hz: float,
    start: int,
    end: int,
) -> np.ndarray:
    """Vertical COM velocity over force[start:end + 1], with v(start) = 0.

    a(t) = (F(t) - BW) / m, integrated with the trapezoidal rule on a 1 / sample_rate time
    base. The last value equals the net impulse over the same window divided by mass.

    Returns:
        Velocity array of length end - start + 1 (m/s).
    """
    seg = np.asarray(force[start : end + 1], dtype=float)
    if len(seg) < 2:
        return np.zeros(len(seg))
    a = (seg - bodyweight) / body_mass(bodyweight)
    return cumulative_trapezoid(a, dx=1.0 / sample_rate_hz, initial=0)


def compute_displacement(velocity: np.ndarray, sample_rate_hz: float) -> np.ndarray:
    """COM displacement (m) from a velocity trace starting at zero displacement."""
    if len(velocity) < 2:
        return np.zeros(len(velocity))
    return cumulative_trapezoid(velocity, dx=1.0 / sample_rate_hz, initial=0)


def rate_of_force_development(
    force: np.ndarray, sample_rate_hz: float, window_ms: float = 20.0, poly: int = 3
) -> np.ndarray:
    """dF/dt (N/s) of a Savitzky-Golay smoothed force trace, same length as the input."""
    force = np.asarray(force, dtype=float)
    n = len(force)
    if n < 2:
        return np.zeros(n)
    w = max(3, int(sample_rate_hz * window_ms / 1000.0) | 1)
    if w > n:
        w = n if n % 2 else n - 1
    if w < 3:
        return np.gradient(force, 1.0 / sample_rate_hz)
    poly = min(poly, w - 1)
    f_smooth = savgol_filter(force, window_length=w, polyorder=poly, mode="nearest")
    return np.gradient(f_smooth, 1.0 / sample_rate_hz)
