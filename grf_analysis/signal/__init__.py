from .conditioning import condition, windowed_noise_rms
from .filter import lowpass_filter

__all__ = ["condition", "lowpass_filter", "windowed_noise_rms"]
