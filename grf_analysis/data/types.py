"""Typed structures for bilateral force-platform captures and analysis results."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from ..errors import InputValidationError

MetricsResult = Dict[str, float]


def _frozen(arr: Optional[np.ndarray], dtype, shape_tail: Tuple[int, ...] = ()) -> Optional[np.ndarray]:
    if arr is None:
        return None
    out = np.array(arr, dtype=dtype, copy=True)
    if shape_tail and out.size == 0:
        out = out.reshape((0,) + shape_tail)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class ForceSample:
    """One calibrated sample from the dual platform (forces in N, COP in mm)."""

    timestamp_ms: int
    left_grf: float
    right_grf: float
    left_cop: Optional[Tuple[float, float]] = None
    right_cop: Optional[Tuple[float, float]] = None

    @property
    def total_grf(self) -> float:
        return self.left_grf + self.right_grf


@dataclass(frozen=True)
class ForceSeries:
    """Immutable bilateral force capture.

    Arrays are copied and marked read-only on construction. COP arrays have shape (n, 2)
    with NaN rows where the platform reported no COP for that sample.
    Emptiness and timestamp order are checked by ``validate_inputs``, not here, so that
    a malformed capture can still be represented and rejected explicitly.
    """

    timestamps_ms: np.ndarray
    left: np.ndarray
    right: np.ndarray
    sample_rate_hz: float
    left_cop: Optional[np.ndarray] = None
    right_cop: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamps_ms", _frozen(self.timestamps_ms, np.int64))
        object.__setattr__(self, "left", _frozen(self.left, float))
        object.__setattr__(self, "right", _frozen(self.right, float))
        object.__setattr__(self, "left_cop", _frozen(self.left_cop, float, (2,)))
        object.__setattr__(self, "right_cop", _frozen(self.right_cop, float, (2,)))
        object.__setattr__(self, "sample_rate_hz", float(self.sample_rate_hz))

        n = len(self.timestamps_ms)
        if len(self.left) != n or len(self.right) != n:
            raise InputValidationError(
                f"Array length mismatch: timestamps={n}, left={len(self.left)}, right={len(self.right)}"
            )
        for name in ("left_cop", "right_cop"):
            cop = getattr(self, name)
            if cop is not None and cop.shape != (n, 2):
                raise InputValidationError(f"{name} must have shape ({n}, 2), got {cop.shape}")

    @classmethod
    def from_samples(cls, samples: Iterable[ForceSample], sample_rate_hz: float) -> "ForceSeries":
        """Build a series from ForceSample records; COP arrays are kept only if any sample has one."""
        samples = list(samples)
        ts = [s.timestamp_ms for s in samples]
        left = [s.left_grf for s in samples]
        right = [s.right_grf for s in samples]

        def _cop(values: Sequence[Optional[Tuple[float, float]]]) -> Optional[np.ndarray]:
            if all(v is None for v in values):
                return None
            return np.array([v if v is not None else (np.nan, np.nan) for v in values], dtype=float)

        return cls(
            timestamps_ms=np.asarray(ts, dtype=np.int64),
            left=np.asarray(left, dtype=float),
            right=np.asarray(right, dtype=float),
            sample_rate_hz=sample_rate_hz,
            left_cop=_cop([s.left_cop for s in samples]),
            right_cop=_cop([s.right_cop for s in samples]),
        )

    def __len__(self) -> int:
        return len(self.timestamps_ms)

    @property
    def total(self) -> np.ndarray:
        return self.left + self.right

    @property
    def dt(self) -> float:
        return 1.0 / self.sample_rate_hz

    @property
    def duration_s(self) -> float:
        return len(self) / self.sample_rate_hz

    @property
    def has_cop(self) -> bool:
        return self.left_cop is not None or self.right_cop is not None

    def with_channels(self, left: np.ndarray, right: np.ndarray) -> "ForceSeries":
        """New series with replaced force channels; timestamps, rate and COP are shared."""
        return ForceSeries(
            timestamps_ms=self.timestamps_ms,
            left=left,
            right=right,
            sample_rate_hz=self.sample_rate_hz,
            left_cop=self.left_cop,
            right_cop=self.right_cop,
        )


@dataclass(frozen=True)
class ConditionedSeries:
    """Output of signal conditioning: corrected series plus flags and baseline estimates."""

    series: ForceSeries
    noisy: bool = False
    insufficient_samples: bool = False
    noise_level_n: float = 0.0
    baseline_left_n: float = 0.0
    baseline_right_n: float = 0.0
    offset_left_n: float = 0.0  # subtracted from the left channel
    offset_right_n: float = 0.0
    invalid_mask: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))

    def __len__(self) -> int:
        return len(self.series)

    @property
    def left(self) -> np.ndarray:
        return self.series.left

    @property
    def right(self) -> np.ndarray:
        return self.series.right

    @property
    def total(self) -> np.ndarray:
        return self.series.total

    @property
    def sample_rate_hz(self) -> float:
        return self.series.sample_rate_hz

    @property
    def dt(self) -> float:
        return self.series.dt

    @property
    def duration_s(self) -> float:
        return self.series.duration_s

    @property
    def invalid_sample_count(self) -> int:
        return int(np.count_nonzero(self.invalid_mask))


class PhaseKind(str, Enum):
    """Movement phases; only a subset applies per test type."""

    QUIET_STANDING = "quiet_standing"
    UNLOADING = "unloading"
    BRAKING = "braking"
    PROPULSION = "propulsion"
    FLIGHT = "flight"
    LANDING = "landing"
    STEADY_HOLD = "steady_hold"
    SWAY = "sway"


@dataclass(frozen=True)
class PhaseSegment:
    """Half-open index range [start_index, end_index) into the conditioned series."""

    kind: PhaseKind
    start_index: int
    end_index: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_index < self.end_index:
            raise InputValidationError(f"Invalid segment bounds: {self.start_index}..{self.end_index}")

    @property
    def n_samples(self) -> int:
        return self.end_index - self.start_index

    def duration_s(self, sample_rate_hz: float) -> float:
        return self.n_samples / sample_rate_hz

    def as_slice(self) -> slice:
        return slice(self.start_index, self.end_index)


@dataclass(frozen=True)
class QualityAssessment:
    """Score in [0, 100] with ordered reasons and recommended actions."""

    score: float
    reasons: Tuple[str, ...] = ()
    recommended_actions: Tuple[str, ...] = ()

    @property
    def grade(self) -> str:
        if self.score >= 90:
            return "excellent"
        if self.score >= 75:
            return "good"
        if self.score >= 50:
            return "fair"
        return "poor"
