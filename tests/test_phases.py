from __future__ import annotations

import numpy as np
import pytest

from grf_analysis import InputValidationError, PhaseKind, PhaseSegment, condition, detect_phases, get_profile
from grf_analysis.detect import first_sustained

from conftest import BODY_WEIGHT, cmj_force, make_series, squat_jump_force


def _detect(series, test_type: str):
    return detect_phases(condition(series), BODY_WEIGHT, get_profile(test_type))


def _assert_ordered(phases) -> None:
    for prev, cur in zip(phases, phases[1:]):
        assert prev.start_index < cur.start_index
        assert prev.end_index <= cur.start_index


def test_cmj_phase_sequence(cmj_series) -> None:
    phases = _detect(cmj_series, "CMJ")

    assert [p.kind for p in phases] == [
        PhaseKind.QUIET_STANDING,
        PhaseKind.UNLOADING,
        PhaseKind.BRAKING,
        PhaseKind.PROPULSION,
        PhaseKind.FLIGHT,
        PhaseKind.LANDING,
    ]
    _assert_ordered(phases)
    by_kind = {p.kind: p for p in phases}
    assert by_kind[PhaseKind.UNLOADING].start_index == 1071
    assert by_kind[PhaseKind.BRAKING].start_index == 1300
    assert by_kind[PhaseKind.FLIGHT].start_index == 1700
    assert by_kind[PhaseKind.FLIGHT].n_samples == 400
    assert by_kind[PhaseKind.LANDING].start_index == 2100


def test_shallow_countermovement_still_finds_flight(shallow_cmj_series) -> None:
    phases = _detect(shallow_cmj_series, "CMJ")

    kinds = [p.kind for p in phases]
    assert PhaseKind.UNLOADING not in kinds
    assert kinds[-3:] == [PhaseKind.PROPULSION, PhaseKind.FLIGHT, PhaseKind.LANDING]
    _assert_ordered(phases)
    flight = phases[-2]
    assert flight.start_index == 1700
    assert flight.n_samples == pytest.approx(400, abs=5)


def test_takeoff_drop_is_not_unloading() -> None:
    phases = _detect(make_series(squat_jump_force()), "CMJ")

    assert [p.kind for p in phases][-3:] == [PhaseKind.PROPULSION, PhaseKind.FLIGHT, PhaseKind.LANDING]
    assert all(p.kind is not PhaseKind.UNLOADING for p in phases)


def test_single_sample_dropout_does_not_trigger_takeoff() -> None:
    force = cmj_force()
    force[1600:1605] = 0.0
    phases = _detect(make_series(force), "CMJ")

    flight = [p for p in phases if p.kind is PhaseKind.FLIGHT]
    assert len(flight) == 1
    assert flight[0].start_index == 1700


def test_squat_jump_skips_countermovement(squat_jump_series) -> None:
    phases = _detect(squat_jump_series, "SJ")

    kinds = [p.kind for p in phases]
    assert PhaseKind.UNLOADING not in kinds
    assert PhaseKind.BRAKING not in kinds
    assert kinds[-3:] == [PhaseKind.PROPULSION, PhaseKind.FLIGHT, PhaseKind.LANDING]
    _assert_ordered(phases)


def test_drop_jump_contact_is_landing(drop_jump_series) -> None:
    phases = _detect(drop_jump_series, "DJ")

    assert [p.kind for p in phases] == [PhaseKind.LANDING, PhaseKind.FLIGHT, PhaseKind.LANDING]
    assert (phases[0].start_index, phases[0].end_index) == (500, 750)
    assert (phases[1].start_index, phases[1].end_index) == (750, 1150)


def test_isometric_single_steady_hold(imtp_series) -> None:
    phases = _detect(imtp_series, "IMTP")

    assert [p.kind for p in phases] == [PhaseKind.QUIET_STANDING, PhaseKind.STEADY_HOLD]
    hold = phases[1]
    assert 1000 < hold.start_index < 1020
    assert hold.end_index == 3500


def test_balance_single_sway(balance_series) -> None:
    phases = _detect(balance_series, "QUIET_STAND")

    assert len(phases) == 1
    assert phases[0].kind is PhaseKind.SWAY
    assert (phases[0].start_index, phases[0].end_index) == (0, len(balance_series))


def test_no_movement_returns_partial_segments() -> None:
    phases = _detect(make_series(np.full(3000, 700.0)), "CMJ")

    assert [p.kind for p in phases] == [PhaseKind.QUIET_STANDING]


def test_missing_landing_stops_after_propulsion() -> None:
    force = cmj_force()[:1900]
    phases = _detect(make_series(force), "CMJ")

    assert phases[-1].kind is PhaseKind.PROPULSION


def test_insufficient_samples_yield_no_phases() -> None:
    assert _detect(make_series(np.full(10, 700.0)), "CMJ") == []


def test_non_positive_body_weight_rejected(cmj_series) -> None:
    with pytest.raises(InputValidationError):
        detect_phases(condition(cmj_series), 0.0, get_profile("CMJ"))


def test_first_sustained_requires_full_dwell() -> None:
    mask = np.array([False, True, False, True, True, True, False])

    assert first_sustained(mask, 0, 3) == 3
    assert first_sustained(mask, 0, 4) is None
    assert first_sustained(mask, 4, 1) == 4


@pytest.mark.parametrize("start, end", [(5, 5), (10, 3), (-1, 4)])
def test_segment_bounds_validated(start: int, end: int) -> None:
    with pytest.raises(InputValidationError):
        PhaseSegment(PhaseKind.FLIGHT, start, end)
