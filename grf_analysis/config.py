"""Test-type profiles and default configuration for conditioning, phase detection and quality scoring."""
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .errors import InputValidationError


class TestFamily(str, Enum):
    """Movement family; selects the phase scan and metric set."""

    JUMP = "jump"
    ISOMETRIC = "isometric"
    BALANCE = "balance"


@dataclass(frozen=True)
class TestTypeProfile:
    """Thresholds (fractions of body weight) and timing constraints for one test protocol."""

    name: str
    family: TestFamily
    countermovement: bool = True  # False => no Unloading/Braking (squat jump)
    reactive: bool = False  # drop-jump family: athlete lands on the plate first
    quiet_standing_cv: float = 0.05
    quiet_window_samples: int = 100
    unloading_threshold: float = 0.90
    braking_threshold: float = 1.2
    takeoff_threshold: float = 0.10
    landing_threshold: float = 0.50
    onset_threshold: float = 0.05
    min_dwell_ms: float = 20.0
    landing_hold_ms: float = 200.0
    expected_duration_s: float = 5.0
    rfd_savgol_window_ms: float = 20.0
    rfd_savgol_poly: int = 3
    rfd_windows_ms: Tuple[float, ...] = (50.0, 100.0, 150.0, 200.0, 250.0)
    min_jump_height_cm: Optional[float] = None
    min_flight_time_s: Optional[float] = None
    max_cop_range_mm: Optional[float] = None
    required_metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConditionerConfig:
    """Signal conditioning defaults."""

    baseline_window_ms: float = 200.0
    baseline_fraction: float = 0.10  # used when the series is shorter than the window
    noise_window_samples: int = 50
    noise_ceiling_n: float = 10.0  # N RMS
    noise_stable_window_samples: int = 100
    noise_stable_cv: float = 0.02  # only windows steadier than this are scored for noise
    negative_tolerance_n: float = 20.0
    zero_load_ceiling_n: float = 50.0  # first window counts as unloaded below this mean total force
    min_samples: int = 20
    lowpass_cutoff_hz: Optional[float] = None
    lowpass_order: int = 4


@dataclass(frozen=True)
class QualityConfig:
    """Deductions and limits applied by the quality assessment."""

    min_duration_ratio: float = 0.5
    max_duration_ratio: float = 2.0
    too_short_deduction: float = 20.0
    too_long_deduction: float = 15.0
    min_samples: int = 100
    few_samples_deduction: float = 25.0
    asymmetry_high_pct: float = 20.0
    asymmetry_high_deduction: float = 15.0
    asymmetry_moderate_pct: float = 10.0
    asymmetry_moderate_deduction: float = 5.0
    cv_window_samples: int = 100
    max_force_cv: float = 0.15
    force_cv_deduction: float = 10.0
    low_jump_deduction: float = 10.0
    short_flight_deduction: float = 5.0
    cop_range_deduction: float = 10.0
    missing_metric_deduction: float = 20.0
    multiple_takeoff_deduction: float = 10.0
    noisy_deduction: float = 5.0
    invalid_samples_deduction: float = 10.0


DEFAULT_CONDITIONER_CONFIG = ConditionerConfig()
DEFAULT_QUALITY_CONFIG = QualityConfig()

_JUMP_METRICS = ("jump_height_cm", "jump_height_cm_flight", "flight_time_s")

_CMJ = TestTypeProfile(
    name="CMJ",
    family=TestFamily.JUMP,
    expected_duration_s=5.0,
    min_jump_height_cm=10.0,
    min_flight_time_s=0.2,
    required_metrics=_JUMP_METRICS,
)
_SJ = replace(
    _CMJ,
    name="SJ",
    countermovement=False,
    unloading_threshold=0.95,
    braking_threshold=1.1,
)
_DJ = replace(
    _CMJ,
    name="DJ",
    countermovement=False,
    reactive=True,
    unloading_threshold=0.8,
    braking_threshold=1.5,
    landing_threshold=0.8,
    expected_duration_s=6.0,
    required_metrics=("jump_height_cm_flight", "flight_time_s", "ground_contact_time_s", "rsi"),
)
_IMTP = TestTypeProfile(
    name="IMTP",
    family=TestFamily.ISOMETRIC,
    countermovement=False,
    expected_duration_s=6.0,
    landing_hold_ms=0.0,
    required_metrics=("peak_hold_force_n", "net_peak_force_n"),
)
_QUIET_STAND = TestTypeProfile(
    name="QUIET_STAND",
    family=TestFamily.BALANCE,
    countermovement=False,
    expected_duration_s=30.0,
    max_cop_range_mm=50.0,
    required_metrics=("cop_path_length_mm", "stability_index_mm"),
)

PROFILES: Mapping[str, TestTypeProfile] = MappingProxyType(
    {
        "CMJ": _CMJ,
        "CMJ_LOADED": replace(_CMJ, name="CMJ_LOADED", min_jump_height_cm=5.0),
        "ABALAKOV": replace(_CMJ, name="ABALAKOV"),
        "SINGLE_LEG_CMJ": replace(_CMJ, name="SINGLE_LEG_CMJ", min_jump_height_cm=5.0, min_flight_time_s=0.15),
        "SJ": _SJ,
        "DJ": _DJ,
        "SINGLE_LEG_DJ": replace(_DJ, name="SINGLE_LEG_DJ", expected_duration_s=5.0),
        "IMTP": _IMTP,
        "ISOMETRIC_SQUAT": replace(_IMTP, name="ISOMETRIC_SQUAT", expected_duration_s=7.0),
        "QUIET_STAND": _QUIET_STAND,
        "SINGLE_LEG_STAND": replace(_QUIET_STAND, name="SINGLE_LEG_STAND", expected_duration_s=20.0),
    }
)

_ALIASES = {"SB": "QUIET_STAND", "SLB": "SINGLE_LEG_STAND"}


def get_profile(test_type: str) -> TestTypeProfile:
    """Look up a profile by test-type identifier (case-insensitive, legacy aliases accepted)."""
    key = str(test_type).strip().upper().replace("-", "_").replace(" ", "_")
    key = _ALIASES.get(key, key)
    try:
        return PROFILES[key]
    except KeyError:
        raise InputValidationError(
            f"Unknown test type {test_type!r}; expected one of {sorted(PROFILES)}"
        ) from None
