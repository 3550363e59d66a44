"""Per-test-type metrics: force, impulse, jump height, power, RFD, RSI and COP sway.

A metric whose phase was not detected is left out of the result rather than set to zero.
"""
import logging
from typing import Dict, Optional, Sequence, Union

import numpy as np
from scipy.integrate import trapezoid

from ..config import TestFamily, TestTypeProfile, get_profile
from ..data.types import ConditionedSeries, MetricsResult, PhaseKind, PhaseSegment
from ..data.validation import validate_inputs
from .asymmetry import compute_asymmetry
from .balance import compute_cop_metrics
from .kinematics import G, body_mass, compute_displacement, compute_velocity, rate_of_force_development

logger = logging.getLogger(__name__)


def _first(phases: Sequence[PhaseSegment], kind: PhaseKind, after: int = 0) -> Optional[PhaseSegment]:
    return next((p for p in phases if p.kind is kind and p.start_index >= after), None)


def _impulse(force: np.ndarray, bodyweight: float, start: int, end: int, dt: float) -> float:
    """Net impulse (N*s) of force[start:end + 1] above body weight, trapezoidal rule."""
    seg = force[start : end + 1]
    if len(seg) < 2:
        return 0.0
    return float(trapezoid(seg - bodyweight, dx=dt))


def _average_rfd(force: np.ndarray, onset: int, a_ms: float, b_ms: float, sample_rate_hz: float) -> Optional[float]:
    """(F(onset + b) - F(onset + a)) / (b - a) in N/s; None when the window runs past the series."""
    a = int(round(a_ms * sample_rate_hz / 1000.0))
    b = int(round(b_ms * sample_rate_hz / 1000.0))
    if b <= a or onset + b >= len(force):
        return None
    return float(force[onset + b] - force[onset + a]) / ((b - a) / sample_rate_hz)


def jump_height_from_velocity_cm(takeoff_velocity: float) -> float:
    """h = v^2 / (2g), in cm; 0 for a non-upward take-off velocity."""
    if takeoff_velocity <= 0:
        return 0.0
    return float(takeoff_velocity ** 2 / (2 * G) * 100.0)


def jump_height_from_flight_cm(flight_time_s: float) -> float:
    """h = g * t^2 / 8, in cm."""
    return float(G * flight_time_s ** 2 / 8.0 * 100.0)


def _common_metrics(conditioned: ConditionedSeries, bodyweight: float) -> Dict[str, float]:
    force = conditioned.total
    left = conditioned.left
    right = conditioned.right
    mean_force = float(np.mean(force))
    mean_left = float(np.mean(left))
    mean_right = float(np.mean(right))
    out = {
        "peak_force_n": float(np.max(force)),
        "mean_force_n": mean_force,
        "min_force_n": float(np.min(force)),
        "relative_peak_force": float(np.max(force)) / bodyweight,
        "peak_left_force_n": float(np.max(left)),
        "peak_right_force_n": float(np.max(right)),
        "mean_left_force_n": mean_left,
        "mean_right_force_n": mean_right,
    }
    if mean_left + mean_right > 0:
        out["left_load_pct"] = mean_left / (mean_left + mean_right) * 100.0
        out["right_load_pct"] = mean_right / (mean_left + mean_right) * 100.0
    if mean_force > 0:
        out["force_cv"] = float(np.std(force)) / mean_force
    return out


def _jump_metrics(
    conditioned: ConditionedSeries,
    phases: Sequence[PhaseSegment],
    profile: TestTypeProfile,
    bodyweight: float,
) -> Dict[str, float]:
    force = conditioned.total
    n = len(force)
    sr = conditioned.sample_rate_hz
    dt = conditioned.dt
    mass = body_mass(bodyweight)
    out: Dict[str, float] = {}

    unloading = _first(phases, PhaseKind.UNLOADING)
    braking = _first(phases, PhaseKind.BRAKING)
    propulsion = _first(phases, PhaseKind.PROPULSION)
    flight = _first(phases, PhaseKind.FLIGHT)

    if unloading is not None:
        end = min(unloading.end_index, n - 1)
        out["unloading_impulse_ns"] = _impulse(force, bodyweight, unloading.start_index, end, dt)
        out["unloading_time_s"] = unloading.duration_s(sr)
        out["unloading_min_force_n"] = float(np.min(force[unloading.as_slice()]))
    if braking is not None:
        out["braking_impulse_ns"] = _impulse(force, bodyweight, braking.start_index, braking.end_index, dt)
        out["braking_time_s"] = braking.duration_s(sr)

    if propulsion is not None:
        # Contact window from the first movement phase through take-off; velocity and
        # impulse share it so that v(take-off) == net impulse / mass.
        start = min(p.start_index for p in (unloading, braking, propulsion) if p is not None)
        takeoff = propulsion.end_index
        velocity = compute_velocity(force, bodyweight, sr, start, takeoff)
        net_impulse = _impulse(force, bodyweight, start, takeoff, dt)
        takeoff_velocity = net_impulse / mass
        jump_height_cm = jump_height_from_velocity_cm(takeoff_velocity)
        time_to_takeoff = (takeoff - start) * dt

        out["net_impulse_ns"] = net_impulse
        out["takeoff_velocity_m_s"] = takeoff_velocity
        out["jump_height_cm"] = jump_height_cm
        out["time_to_takeoff_s"] = time_to_takeoff
        if time_to_takeoff > 0:
            out["rsi_modified"] = (jump_height_cm / 100.0) / time_to_takeoff
        out["peak_velocity_m_s"] = float(np.max(velocity))

        out["propulsion_impulse_ns"] = _impulse(force, bodyweight, propulsion.start_index, takeoff, dt)
        out["propulsion_time_s"] = propulsion.duration_s(sr)
        prop_force = force[propulsion.start_index : takeoff + 1]
        out["peak_propulsion_force_n"] = float(np.max(prop_force))
        out["mean_propulsion_force_n"] = float(np.mean(prop_force))

        power = prop_force * velocity[propulsion.start_index - start :]
        out["peak_power_w"] = float(np.max(power))
        out["average_power_w"] = float(np.mean(power))
        out["relative_peak_power_w_kg"] = out["peak_power_w"] / mass

        if profile.countermovement and unloading is not None:
            displacement = compute_displacement(velocity, sr)
            out["countermovement_depth_cm"] = float(-np.min(displacement) * 100.0)

        rfd_start = braking.start_index if braking is not None else propulsion.start_index
        rfd = rate_of_force_development(force, sr, profile.rfd_savgol_window_ms, profile.rfd_savgol_poly)
        rfd_window = rfd[rfd_start : takeoff + 1]
        out["peak_rfd_n_s"] = float(np.max(rfd_window))
        out["time_to_peak_rfd_s"] = float(np.argmax(rfd_window)) * dt

    if flight is not None:
        flight_time = flight.duration_s(sr)
        out["flight_time_s"] = flight_time
        out["jump_height_cm_flight"] = jump_height_from_flight_cm(flight_time)
        landing = _first(phases, PhaseKind.LANDING, after=flight.end_index)
        if landing is not None:
            landing_force = force[landing.as_slice()]
            out["peak_landing_force_n"] = float(np.max(landing_force))
            out["relative_landing_force"] = out["peak_landing_force_n"] / bodyweight

    if profile.reactive and flight is not None:
        contact = next(
            (p for p in phases if p.kind is PhaseKind.LANDING and p.end_index == flight.start_index),
            None,
        )
        if contact is not None:
            contact_time = contact.duration_s(sr)
            out["ground_contact_time_s"] = contact_time
            height = out.get("jump_height_cm", out["jump_height_cm_flight"])
            if contact_time > 0:
                out["rsi"] = height / contact_time
    return out


def _isometric_metrics(
    conditioned: ConditionedSeries,
    phases: Sequence[PhaseSegment],
    profile: TestTypeProfile,
    bodyweight: float,
) -> Dict[str, float]:
    force = conditioned.total
    n = len(force)
    sr = conditioned.sample_rate_hz
    dt = conditioned.dt
    out: Dict[str, float] = {}

    hold = _first(phases, PhaseKind.STEADY_HOLD)
    if hold is None:
        return out
    quiet = _first(phases, PhaseKind.QUIET_STANDING)
    baseline = float(np.mean(force[quiet.as_slice()])) if quiet is not None else bodyweight
    onset = hold.start_index
    hold_force = force[hold.as_slice()]
    peak_rel = int(np.argmax(hold_force))

    out["baseline_force_n"] = baseline
    out["peak_hold_force_n"] = float(hold_force[peak_rel])
    out["mean_hold_force_n"] = float(np.mean(hold_force))
    out["net_peak_force_n"] = float(hold_force[peak_rel]) - baseline
    out["relative_net_peak_force"] = out["net_peak_force_n"] / bodyweight
    out["time_to_peak_force_s"] = peak_rel * dt
    out["hold_duration_s"] = hold.duration_s(sr)

    rfd = rate_of_force_development(force, sr, profile.rfd_savgol_window_ms, profile.rfd_savgol_poly)
    out["peak_rfd_n_s"] = float(np.max(rfd[hold.as_slice()]))
    for window_ms in profile.rfd_windows_ms:
        slope = _average_rfd(force, onset, 0.0, window_ms, sr)
        if slope is not None:
            out[f"rfd_0_{int(window_ms)}ms_n_s"] = slope
    for a_ms, b_ms in ((50.0, 100.0), (100.0, 200.0)):
        slope = _average_rfd(force, onset, a_ms, b_ms, sr)
        if slope is not None:
            out[f"rfd_{int(a_ms)}_{int(b_ms)}ms_n_s"] = slope
    for t_ms in (50.0, 100.0, 150.0, 200.0):
        k = int(round(t_ms * sr / 1000.0))
        if onset + k < n:
            out[f"force_at_{int(t_ms)}ms_n"] = float(force[onset + k])

    for window_ms in (100.0, 200.0):
        k = int(round(window_ms * sr / 1000.0))
        if onset + k < n:
            out[f"impulse_0_{int(window_ms)}ms_ns"] = _impulse(force, baseline, onset, onset + k, dt)
    return out


def _balance_metrics(
    conditioned: ConditionedSeries,
    phases: Sequence[PhaseSegment],
) -> Dict[str, float]:
    sway = _first(phases, PhaseKind.SWAY)
    if sway is None:
        return {}
    out = compute_cop_metrics(conditioned, sway.as_slice())
    out["sway_duration_s"] = sway.duration_s(conditioned.sample_rate_hz)
    return out


def calculate(
    conditioned: ConditionedSeries,
    phases: Sequence[PhaseSegment],
    test_type: Union[str, TestTypeProfile],
    body_weight_n: float,
) -> MetricsResult:
    """Compute the metric map for one test run.

    Pure function of its inputs. Common force metrics and whole-capture force asymmetry
    are always present; phase-dependent metrics appear only when their phases exist.

    Args:
        conditioned: Output of ``condition``.
        phases: Segments from ``detect_phases``.
        test_type: Profile or test-type identifier.
        body_weight_n: Body-weight reference (N).

    Returns:
        Dict of metric name -> float.

    Raises:
        InputValidationError: Empty series, bad timestamps, non-positive body weight or
            sample rate, or an unknown test type.
    """
    validate_inputs(conditioned, body_weight_n)
    profile = test_type if isinstance(test_type, TestTypeProfile) else get_profile(test_type)

    metrics: MetricsResult = _common_metrics(conditioned, body_weight_n)
    if profile.family is TestFamily.JUMP:
        metrics.update(_jump_metrics(conditioned, phases, profile, body_weight_n))
    elif profile.family is TestFamily.ISOMETRIC:
        metrics.update(_isometric_metrics(conditioned, phases, profile, body_weight_n))
    else:
        metrics.update(_balance_metrics(conditioned, phases))
    metrics.update(compute_asymmetry(conditioned, phases, profile))

    logger.debug("%s: %d metrics computed", profile.name, len(metrics))
    return metrics
