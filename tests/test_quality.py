from __future__ import annotations

from datetime import timedelta

import numpy as np
import pytest

from grf_analysis import (
    QualityAssessment,
    QualityConfig,
    assess,
    calculate,
    condition,
    detect_phases,
    get_profile,
    run_analysis,
)
from grf_analysis.quality import windowed_force_cv

from conftest import BODY_WEIGHT, cmj_force, make_series


def _metrics(conditioned, test_type: str = "CMJ"):
    profile = get_profile(test_type)
    phases = detect_phases(conditioned, BODY_WEIGHT, profile)
    return calculate(conditioned, phases, profile, BODY_WEIGHT)


def test_too_long_capture_costs_fifteen_points(cmj_series) -> None:
    conditioned = condition(cmj_series)
    metrics = _metrics(conditioned)

    matching = assess(metrics, conditioned, expected_duration=5.0, test_type="CMJ")
    too_long = assess(metrics, conditioned, expected_duration=5.0 / 3.0, test_type="CMJ")

    assert any(r.startswith("Test too long") for r in too_long.reasons)
    assert not any(r.startswith("Test too long") for r in matching.reasons)
    assert matching.score - too_long.score == pytest.approx(15.0)


def test_too_short_capture(cmj_series) -> None:
    conditioned = condition(cmj_series)

    result = assess(_metrics(conditioned), conditioned, expected_duration=timedelta(seconds=20), test_type="CMJ")

    assert any(r.startswith("Test too short") for r in result.reasons)


def test_clean_balance_capture_scores_full_marks(balance_series) -> None:
    conditioned = condition(balance_series)

    result = assess(_metrics(conditioned, "QUIET_STAND"), conditioned, test_type="QUIET_STAND")

    assert result.score == 100.0
    assert result.reasons == ()
    assert result.grade == "excellent"


def test_score_clamped_to_zero() -> None:
    conditioned = condition(make_series(np.full(10, 700.0)))

    result = assess({}, conditioned, config=QualityConfig(few_samples_deduction=250.0))

    assert result.score == 0.0
    assert "Only 10 samples recorded (minimum 100)" in result.reasons
    assert result.recommended_actions


def test_missing_required_metrics() -> None:
    conditioned = condition(make_series(np.full(5000, 700.0)))

    result = assess(_metrics(conditioned), conditioned, test_type="CMJ")

    missing = [r for r in result.reasons if r.startswith("Could not compute")]
    assert len(missing) == 1
    assert "flight_time_s" in missing[0]
    assert result.score == 80.0


def test_multiple_takeoffs_need_body_weight() -> None:
    force = cmj_force()
    force[3000:3400] = 0.0
    conditioned = condition(make_series(force))
    metrics = _metrics(conditioned)

    with_bw = assess(metrics, conditioned, test_type="CMJ", body_weight_n=BODY_WEIGHT)
    without_bw = assess(metrics, conditioned, test_type="CMJ")

    assert "Multiple take-offs detected (2)" in with_bw.reasons
    assert without_bw.score - with_bw.score == pytest.approx(10.0)


def test_high_asymmetry_deduction() -> None:
    conditioned = condition(make_series(np.full(1000, 700.0), left_share=0.65))

    result = assess(_metrics(conditioned, "IMTP"), conditioned, expected_duration=1.0, test_type="IMTP")

    assert any(r.startswith("High left/right asymmetry") for r in result.reasons)


def test_non_positive_expected_duration_skips_check(cmj_series) -> None:
    conditioned = condition(cmj_series)

    result = assess(_metrics(conditioned), conditioned, expected_duration=0.0, test_type="CMJ")

    assert "Expected duration unavailable; duration check skipped" in result.reasons


def test_windowed_force_cv() -> None:
    assert windowed_force_cv(np.full(500, 700.0), 100) == 0.0
    assert windowed_force_cv(np.zeros(500), 100) is None
    assert windowed_force_cv(np.ones(50), 100) is None


@pytest.mark.parametrize(
    "score, grade",
    [(100.0, "excellent"), (90.0, "excellent"), (80.0, "good"), (50.0, "fair"), (10.0, "poor")],
)
def test_grade(score: float, grade: str) -> None:
    assert QualityAssessment(score=score).grade == grade


def test_clean_jump_scores_full_marks(cmj_series) -> None:
    result = run_analysis(cmj_series, BODY_WEIGHT, "CMJ")

    assert not result.noisy
    assert result.quality.score == 100.0
    assert result.quality.reasons == ()


def test_unknown_test_type_is_scored_not_raised(cmj_series) -> None:
    conditioned = condition(cmj_series)

    result = assess({}, conditioned, expected_duration=5.0, test_type="BACKFLIP")

    assert "Unknown test type 'BACKFLIP'; test-specific checks skipped" in result.reasons
    assert 0.0 <= result.score <= 100.0
