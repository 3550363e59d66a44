"""Left/right asymmetry: one index formula applied to force, impulse and RFD pairs."""
from typing import Dict, Optional, Sequence

import numpy as np
from scipy.integrate import trapezoid

from ..config import TestFamily, TestTypeProfile
from ..data.types import ConditionedSeries, PhaseKind, PhaseSegment
from .kinematics import rate_of_force_development


def asymmetry_index_pct(left: float, right: float) -> float:
    """|L - R| / (L + R) * 100; 0 when L + R == 0."""
    total = left + right
    if total == 0:
        return 0.0
    return float(abs(left - right) * 100.0 / abs(total))


def _first(phases: Sequence[PhaseSegment], kind: PhaseKind) -> Optional[PhaseSegment]:
    return next((p for p in phases if p.kind is kind), None)


def asymmetry_window(phases: Sequence[PhaseSegment], profile: TestTypeProfile) -> Optional[slice]:
    """Analysis window for the paired quantities, inclusive of the boundary sample."""
    if profile.family is TestFamily.BALANCE:
        seg = _first(phases, PhaseKind.SWAY)
        return seg.as_slice() if seg else None
    if profile.family is TestFamily.ISOMETRIC:
        seg = _first(phases, PhaseKind.STEADY_HOLD)
        return seg.as_slice() if seg else None
    if profile.reactive:
        seg = _first(phases, PhaseKind.LANDING)
        return seg.as_slice() if seg else None
    propulsion = _first(phases, PhaseKind.PROPULSION)
    if propulsion is None:
        return None
    braking = _first(phases, PhaseKind.BRAKING)
    start = braking.start_index if braking else propulsion.start_index
    return slice(start, propulsion.end_index + 1)


def compute_asymmetry(
    conditioned: ConditionedSeries,
    phases: Sequence[PhaseSegment],
    profile: TestTypeProfile,
) -> Dict[str, float]:
    """Force asymmetry over the whole capture; peak force, impulse and RFD asymmetry over the
    phase window of the test type (Braking+Propulsion, ground contact, SteadyHold or Sway).
    Window metrics are omitted when the window's phases were not detected."""
    left = conditioned.left
    right = conditioned.right
    out: Dict[str, float] = {}
    if len(left) == 0:
        return out

    out["force_asymmetry_index_pct"] = asymmetry_index_pct(float(np.mean(left)), float(np.mean(right)))

    window = asymmetry_window(phases, profile)
    if window is None:
        return out
    left_w = left[window]
    right_w = right[window]
    if len(left_w) == 0:
        return out

    out["peak_force_asymmetry_index_pct"] = asymmetry_index_pct(float(np.max(left_w)), float(np.max(right_w)))
    if len(left_w) > 1:
        dt = conditioned.dt
        out["impulse_asymmetry_index_pct"] = asymmetry_index_pct(
            float(trapezoid(left_w, dx=dt)), float(trapezoid(right_w, dx=dt))
        )
    if profile.family is not TestFamily.BALANCE:
        sr = conditioned.sample_rate_hz
        rfd_left = rate_of_force_development(left, sr, profile.rfd_savgol_window_ms, profile.rfd_savgol_poly)
        rfd_right = rate_of_force_development(right, sr, profile.rfd_savgol_window_ms, profile.rfd_savgol_poly)
        out["rfd_asymmetry_index_pct"] = asymmetry_index_pct(
            float(np.max(rfd_left[window])), float(np.max(rfd_right[window]))
        )
    return out
