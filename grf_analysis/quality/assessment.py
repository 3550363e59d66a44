"""Deterministic 0-100 quality score for one test run, with reasons and recommended actions."""
import logging
from datetime import timedelta
from typing import List, Mapping, Optional, Union

import numpy as np

from ..config import DEFAULT_QUALITY_CONFIG, QualityConfig, TestFamily, TestTypeProfile, get_profile
from ..data.types import ConditionedSeries, QualityAssessment
from ..detect.crossings import count_sustained_drops, dwell_samples
from ..errors import InputValidationError

logger = logging.getLogger(__name__)

Duration = Union[float, int, timedelta, None]


def _resolve_profile(test_type: Union[str, TestTypeProfile]) -> Optional[TestTypeProfile]:
    if isinstance(test_type, TestTypeProfile):
        return test_type
    try:
        return get_profile(test_type)
    except InputValidationError:
        return None


def _seconds(expected_duration: Duration, profile: Optional[TestTypeProfile]) -> float:
    if expected_duration is None:
        return profile.expected_duration_s if profile is not None else 0.0
    if isinstance(expected_duration, timedelta):
        return expected_duration.total_seconds()
    return float(expected_duration)


def _metric(metrics: Mapping[str, float], key: str) -> Optional[float]:
    value = metrics.get(key)
    if value is None or not np.isfinite(value):
        return None
    return float(value)


def windowed_force_cv(force: np.ndarray, window: int) -> Optional[float]:
    """Median coefficient of variation over consecutive windows with positive mean force."""
    n = len(force)
    if window <= 1 or n < window:
        return None
    cvs = []
    for start in range(0, n - window + 1, window):
        w = force[start : start + window]
        mean = float(np.mean(w))
        if mean > 0:
            cvs.append(float(np.std(w)) / mean)
    if not cvs:
        return None
    return float(np.median(cvs))


class _Scorecard:
    def __init__(self) -> None:
        self.score = 100.0
        self.reasons: List[str] = []
        self.actions: List[str] = []

    def deduct(self, points: float, reason: str, action: Optional[str] = None) -> None:
        self.score -= points
        self.reasons.append(reason)
        if action and action not in self.actions:
            self.actions.append(action)

    def result(self) -> QualityAssessment:
        score = float(min(100.0, max(0.0, self.score)))
        return QualityAssessment(score=score, reasons=tuple(self.reasons), recommended_actions=tuple(self.actions))


def assess(
    metrics: Mapping[str, float],
    conditioned: ConditionedSeries,
    expected_duration: Duration = None,
    test_type: Union[str, TestTypeProfile] = "CMJ",
    body_weight_n: Optional[float] = None,
    config: QualityConfig = DEFAULT_QUALITY_CONFIG,
) -> QualityAssessment:
    """Score a run starting from 100 and applying fixed deductions; the result is clamped to [0, 100].

    Never raises for badly formed runs: missing metrics, short or noisy captures and
    absent phases all lower the score and add a reason instead.

    Args:
        metrics: Output of ``calculate``.
        conditioned: Output of ``condition`` (duration, sample count, noise flags).
        expected_duration: Expected test length (seconds or timedelta); the profile's
            default when None.
        test_type: Profile or test-type identifier; an unknown identifier is reported as a
            reason and the test-specific checks are skipped.
        body_weight_n: Enables the multiple take-off check for jump tests when given.
        config: Deduction amounts and limits.
    """
    card = _Scorecard()
    profile = _resolve_profile(test_type)
    if profile is None:
        card.reasons.append(f"Unknown test type {test_type!r}; test-specific checks skipped")
    n = len(conditioned)
    force = np.asarray(conditioned.total, dtype=float)

    if n < config.min_samples:
        card.deduct(
            config.few_samples_deduction,
            f"Only {n} samples recorded (minimum {config.min_samples})",
            "Repeat the test and record for the full duration",
        )

    expected_s = _seconds(expected_duration, profile)
    if expected_s > 0 and conditioned.sample_rate_hz > 0:
        ratio = conditioned.duration_s / expected_s
        if ratio < config.min_duration_ratio:
            card.deduct(
                config.too_short_deduction,
                f"Test too short: {conditioned.duration_s:.1f} s of {expected_s:.1f} s expected",
                "Keep recording until the movement is complete",
            )
        elif ratio > config.max_duration_ratio:
            card.deduct(
                config.too_long_deduction,
                f"Test too long: {conditioned.duration_s:.1f} s of {expected_s:.1f} s expected",
                "Stop the recording once the movement is complete",
            )
    else:
        card.reasons.append("Expected duration unavailable; duration check skipped")

    asymmetry = _metric(metrics, "force_asymmetry_index_pct")
    if asymmetry is not None:
        if asymmetry > config.asymmetry_high_pct:
            card.deduct(
                config.asymmetry_high_deduction,
                f"High left/right asymmetry: {asymmetry:.1f}%",
                "Check foot placement and even weight distribution on both platforms",
            )
        elif asymmetry > config.asymmetry_moderate_pct:
            card.deduct(
                config.asymmetry_moderate_deduction,
                f"Moderate left/right asymmetry: {asymmetry:.1f}%",
                "Check foot placement and even weight distribution on both platforms",
            )

    cv = windowed_force_cv(force, config.cv_window_samples)
    if cv is not None and cv > config.max_force_cv:
        card.deduct(
            config.force_cv_deduction,
            f"Unstable force signal: windowed CV {cv:.2f}",
            "Stand still before and after the movement",
        )

    if conditioned.noisy and not conditioned.insufficient_samples:
        card.deduct(
            config.noisy_deduction,
            f"Signal noise {conditioned.noise_level_n:.1f} N above ceiling",
            "Check platform cabling and that nothing touches the platforms",
        )

    if conditioned.invalid_sample_count > 0:
        card.deduct(
            config.invalid_samples_deduction,
            f"{conditioned.invalid_sample_count} samples with physically invalid negative force",
            "Re-zero the platforms before the next test",
        )

    family = profile.family if profile is not None else None
    if family is TestFamily.JUMP:
        _assess_jump(card, metrics, force, profile, body_weight_n, conditioned.sample_rate_hz, config)
    elif family is TestFamily.BALANCE:
        cop_range = max(
            (v for v in (_metric(metrics, "cop_range_x_mm"), _metric(metrics, "cop_range_y_mm")) if v is not None),
            default=None,
        )
        if profile.max_cop_range_mm is not None and cop_range is not None and cop_range > profile.max_cop_range_mm:
            card.deduct(
                config.cop_range_deduction,
                f"Excessive sway: COP range {cop_range:.1f} mm",
                "Ask the athlete to fix their gaze and minimise movement",
            )

    required = profile.required_metrics if profile is not None else ()
    missing = [k for k in required if _metric(metrics, k) is None]
    if missing:
        card.deduct(
            config.missing_metric_deduction,
            f"Could not compute: {', '.join(missing)}",
            "Repeat the test following the protocol for this test type",
        )

    result = card.result()
    name = profile.name if profile is not None else test_type
    logger.info("%s quality score %.0f (%d reasons)", name, result.score, len(result.reasons))
    return result


def _assess_jump(
    card: _Scorecard,
    metrics: Mapping[str, float],
    force: np.ndarray,
    profile: TestTypeProfile,
    body_weight_n: Optional[float],
    sample_rate_hz: float,
    config: QualityConfig,
) -> None:
    height = _metric(metrics, "jump_height_cm")
    if height is None:
        height = _metric(metrics, "jump_height_cm_flight")
    if profile.min_jump_height_cm is not None and height is not None and height < profile.min_jump_height_cm:
        card.deduct(
            config.low_jump_deduction,
            f"Low jump height: {height:.1f} cm",
            "Encourage a maximal effort jump",
        )

    flight_time = _metric(metrics, "flight_time_s")
    if profile.min_flight_time_s is not None and flight_time is not None and flight_time < profile.min_flight_time_s:
        card.deduct(
            config.short_flight_deduction,
            f"Short flight time: {flight_time * 1000:.0f} ms",
            "Keep legs extended until landing",
        )

    if body_weight_n is not None and body_weight_n > 0 and sample_rate_hz > 0 and len(force) > 1:
        dwell = dwell_samples(profile.min_dwell_ms, sample_rate_hz)
        takeoffs = count_sustained_drops(force, profile.takeoff_threshold * body_weight_n, dwell)
        if takeoffs > 1:
            card.deduct(
                config.multiple_takeoff_deduction,
                f"Multiple take-offs detected ({takeoffs})",
                "Perform a single jump per recording",
            )
