"""Phase segmentation of a conditioned force trace: a forward scan driven by body-weight thresholds.

Jump family:  QuietStanding -> Unloading -> Braking -> Propulsion -> Flight -> Landing
  (squat jump, or a countermovement too shallow to cross the unloading threshold, skips
  Unloading/Braking; drop jump starts with a ground-contact Landing)
Isometric:    QuietStanding -> SteadyHold
Balance:      a single Sway segment over the whole capture

The scan stops at the first boundary that is never observed and returns the segments
found so far; downstream metrics treat a missing phase as "not computable".
"""
import logging
from typing import List, Optional, Tuple

import numpy as np

from ..config import TestFamily, TestTypeProfile
from ..data.types import ConditionedSeries, PhaseKind, PhaseSegment
from ..data.validation import validate_inputs
from ..physics.kinematics import compute_velocity
from .crossings import dwell_samples, first_sustained, rolling_cv

logger = logging.getLogger(__name__)


def _find_quiet_standing(force: np.ndarray, profile: TestTypeProfile, dwell: int) -> Optional[Tuple[int, int]]:
    """First contiguous run where the centered CV stays below quiet_standing_cv: (start, run_end)."""
    stable = rolling_cv(force, profile.quiet_window_samples) < profile.quiet_standing_cv
    start = first_sustained(stable, 0, dwell)
    if start is None:
        return None
    unstable_after = np.flatnonzero(~stable[start:])
    run_end = start + int(unstable_after[0]) if unstable_after.size else len(force)
    return start, run_end


def _find_restabilization(force: np.ndarray, landing: int, profile: TestTypeProfile, sample_rate_hz: float) -> int:
    """End of Landing: start of the first stable run lasting landing_hold_ms; series end if none."""
    n = len(force)
    hold = dwell_samples(profile.landing_hold_ms, sample_rate_hz)
    stable = rolling_cv(force, profile.quiet_window_samples) < profile.quiet_standing_cv
    end = first_sustained(stable, landing + 1, hold)
    return n if end is None else end


def _append_quiet(segments: List[PhaseSegment], quiet: Optional[Tuple[int, int]], movement_start: Optional[int], n: int) -> None:
    if quiet is None:
        return
    start, run_end = quiet
    end = min(run_end, movement_start if movement_start is not None else n)
    if end > start:
        segments.append(PhaseSegment(PhaseKind.QUIET_STANDING, start, end))


def _scan_flight_and_landing(
    segments: List[PhaseSegment],
    force: np.ndarray,
    takeoff: int,
    bodyweight: float,
    profile: TestTypeProfile,
    sample_rate_hz: float,
    dwell: int,
) -> None:
    landing = first_sustained(force > profile.landing_threshold * bodyweight, takeoff, dwell)
    if landing is None or landing <= takeoff:
        logger.debug("No landing after take-off at %d", takeoff)
        return
    segments.append(PhaseSegment(PhaseKind.FLIGHT, takeoff, landing))
    landing_end = _find_restabilization(force, landing, profile, sample_rate_hz)
    segments.append(PhaseSegment(PhaseKind.LANDING, landing, landing_end))


def _scan_jump(force: np.ndarray, bodyweight: float, profile: TestTypeProfile, sample_rate_hz: float) -> List[PhaseSegment]:
    n = len(force)
    dwell = dwell_samples(profile.min_dwell_ms, sample_rate_hz)
    segments: List[PhaseSegment] = []
    quiet = _find_quiet_standing(force, profile, dwell)
    scan_start = quiet[0] if quiet is not None else 0
    first_takeoff = first_sustained(force < profile.takeoff_threshold * bodyweight, scan_start, dwell)

    # Unloading must be confirmed before the first take-off; the take-off drop itself is not a countermovement
    unloading_start = None
    if profile.countermovement:
        unloading_start = first_sustained(
            force < profile.unloading_threshold * bodyweight, scan_start, dwell, stop=first_takeoff
        )
        if unloading_start is None:
            logger.debug("No unloading below %.2f BW before take-off", profile.unloading_threshold)

    if unloading_start is not None:
        _append_quiet(segments, quiet, unloading_start, n)

        # Unloading ends at the force minimum before force recovers above the threshold
        recovered = first_sustained(force >= profile.unloading_threshold * bodyweight, unloading_start, dwell)
        stop = recovered if recovered is not None else n
        minimum = unloading_start + int(np.argmin(force[unloading_start:stop]))
        minimum = min(max(minimum, unloading_start + 1), n)
        segments.append(PhaseSegment(PhaseKind.UNLOADING, unloading_start, minimum))
        if recovered is None or minimum >= n - 1:
            return segments

        # Braking ends at the first of: force above braking threshold, COM velocity back to zero
        force_cross = first_sustained(force > profile.braking_threshold * bodyweight, minimum, dwell)
        v = compute_velocity(force, bodyweight, sample_rate_hz, unloading_start, n - 1)
        v_after = np.flatnonzero(v[minimum - unloading_start + 1 :] >= 0.0)
        velocity_zero = minimum + 1 + int(v_after[0]) if v_after.size else None
        candidates = [c for c in (force_cross, velocity_zero) if c is not None and c > minimum]
        if not candidates:
            logger.debug("Braking never completed after minimum at %d", minimum)
            return segments
        braking_end = min(candidates)
        segments.append(PhaseSegment(PhaseKind.BRAKING, minimum, braking_end))
        propulsion_start = braking_end
    else:
        onset = first_sustained(
            force > (1.0 + profile.onset_threshold) * bodyweight, scan_start, dwell, stop=first_takeoff
        )
        _append_quiet(segments, quiet, onset, n)
        if onset is None:
            logger.debug("No propulsion onset above %.2f BW", 1.0 + profile.onset_threshold)
            return segments
        propulsion_start = onset

    takeoff = first_sustained(force < profile.takeoff_threshold * bodyweight, propulsion_start, dwell)
    if takeoff is None or takeoff <= propulsion_start:
        logger.debug("No take-off after %d", propulsion_start)
        return segments
    segments.append(PhaseSegment(PhaseKind.PROPULSION, propulsion_start, takeoff))
    _scan_flight_and_landing(segments, force, takeoff, bodyweight, profile, sample_rate_hz, dwell)
    return segments


def _scan_drop_jump(force: np.ndarray, bodyweight: float, profile: TestTypeProfile, sample_rate_hz: float) -> List[PhaseSegment]:
    """Drop jump: the first ground contact (a Landing segment) bounds the rebound."""
    n = len(force)
    dwell = dwell_samples(profile.min_dwell_ms, sample_rate_hz)
    segments: List[PhaseSegment] = []
    contact = first_sustained(force > profile.landing_threshold * bodyweight, 0, dwell)
    if contact is None:
        logger.debug("No ground contact above %.2f BW", profile.landing_threshold)
        return segments
    takeoff = first_sustained(force < profile.takeoff_threshold * bodyweight, contact, dwell)
    if takeoff is None:
        segments.append(PhaseSegment(PhaseKind.LANDING, contact, n))
        return segments
    segments.append(PhaseSegment(PhaseKind.LANDING, contact, takeoff))
    _scan_flight_and_landing(segments, force, takeoff, bodyweight, profile, sample_rate_hz, dwell)
    return segments


def _scan_isometric(force: np.ndarray, bodyweight: float, profile: TestTypeProfile, sample_rate_hz: float) -> List[PhaseSegment]:
    n = len(force)
    dwell = dwell_samples(profile.min_dwell_ms, sample_rate_hz)
    segments: List[PhaseSegment] = []
    quiet = _find_quiet_standing(force, profile, dwell)
    baseline = quiet_baseline(force, quiet, bodyweight)
    threshold = baseline + profile.onset_threshold * bodyweight
    scan_start = quiet[0] if quiet is not None else 0

    onset = first_sustained(force > threshold, scan_start, dwell)
    _append_quiet(segments, quiet, onset, n)
    if onset is None:
        logger.debug("No isometric onset above %.1f N", threshold)
        return segments
    offset = first_sustained(force < threshold, onset, dwell)
    segments.append(PhaseSegment(PhaseKind.STEADY_HOLD, onset, n if offset is None else offset))
    return segments


def quiet_baseline(force: np.ndarray, quiet: Optional[Tuple[int, int]], bodyweight: float) -> float:
    """Mean force of the quiet run, falling back to body weight."""
    if quiet is None or quiet[1] <= quiet[0]:
        return bodyweight
    return float(np.mean(force[quiet[0] : quiet[1]]))


def detect_phases(conditioned: ConditionedSeries, body_weight_n: float, profile: TestTypeProfile) -> List[PhaseSegment]:
    """Segment the conditioned total force into ordered, non-overlapping phases.

    Args:
        conditioned: Output of ``condition``.
        body_weight_n: Body-weight reference (N); thresholds are fractions of it.
        profile: Test-type profile selecting the scan and its thresholds.

    Returns:
        Segments ordered by start_index. Empty for insufficient series or when no
        boundary is observed.

    Raises:
        InputValidationError: Empty series, bad timestamps or non-positive body weight.
    """
    validate_inputs(conditioned, body_weight_n)
    if conditioned.insufficient_samples:
        logger.debug("Insufficient samples; no phases detected")
        return []

    force = conditioned.total
    sr = conditioned.sample_rate_hz
    if profile.family is TestFamily.BALANCE:
        segments = [PhaseSegment(PhaseKind.SWAY, 0, len(force))]
    elif profile.family is TestFamily.ISOMETRIC:
        segments = _scan_isometric(force, body_weight_n, profile, sr)
    elif profile.reactive:
        segments = _scan_drop_jump(force, body_weight_n, profile, sr)
    else:
        segments = _scan_jump(force, body_weight_n, profile, sr)

    logger.debug(
        "%s phases: %s",
        profile.name,
        ", ".join(f"{s.kind.value}[{s.start_index}:{s.end_index}]" for s in segments) or "none",
    )
    return segments
