from .crossings import count_sustained_drops, dwell_samples, first_sustained, rolling_cv
from .phases import detect_phases

__all__ = [
    "count_sustained_drops",
    "detect_phases",
    "dwell_samples",
    "first_sustained",
    "rolling_cv",
]
