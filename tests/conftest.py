from __future__ import annotations

from typing import Optional

import numpy as np
import pytest

from grf_analysis import ForceSeries

BODY_WEIGHT = 700.0
SAMPLE_RATE = 1000.0


def make_series(
    total: np.ndarray,
    sample_rate: float = SAMPLE_RATE,
    left_share: float = 0.5,
    left_cop: Optional[np.ndarray] = None,
    right_cop: Optional[np.ndarray] = None,
) -> ForceSeries:
    """Split a total-force trace between the two platforms."""
    total = np.asarray(total, dtype=float)
    n = len(total)
    return ForceSeries(
        timestamps_ms=np.round(np.arange(n) * 1000.0 / sample_rate).astype(np.int64),
        left=total * left_share,
        right=total * (1.0 - left_share),
        sample_rate_hz=sample_rate,
        left_cop=left_cop,
        right_cop=right_cop,
    )


def cmj_force() -> np.ndarray:
    """Quiet 700 N for 1 s, unload to 400 N, brake to 1260 N, propel to 1750 N, 400 ms flight, land at 700 N."""
    idx = np.arange(5000)
    force = np.interp(idx, [0, 1000, 1300, 1500, 1699], [700.0, 700.0, 400.0, 1260.0, 1750.0])
    force[1700:2100] = 0.0
    force[2100:] = 700.0
    return force


def shallow_cmj_force() -> np.ndarray:
    """Quiet 700 N for 1 s, unload only to 630 N (0.90 BW), brake to 1260 N, propel to 1750 N, 400 ms flight."""
    idx = np.arange(5000)
    force = np.interp(idx, [0, 1000, 1300, 1500, 1699], [700.0, 700.0, 630.0, 1260.0, 1750.0])
    force[1700:2100] = 0.0
    force[2100:] = 700.0
    return force


def squat_jump_force() -> np.ndarray:
    """Constant 1400 N push for 200 ms (140 N*s net impulse) followed by a matching 400 ms flight."""
    force = np.full(3000, 700.0)
    force[1000:1200] = 1400.0
    force[1200:1600] = 0.0
    return force


def drop_jump_force() -> np.ndarray:
    """Off the platform for 500 ms, 250 ms ground contact, 400 ms flight, landing."""
    force = np.zeros(3000)
    force[500:750] = 2000.0
    force[1150:] = 700.0
    return force


def imtp_force() -> np.ndarray:
    """Quiet 700 N, 300 ms ramp to 2500 N, hold until 3.5 s, release."""
    idx = np.arange(5000)
    force = np.interp(idx, [0, 1000, 1300, 3499], [700.0, 700.0, 2500.0, 2500.0])
    force[3500:] = 700.0
    return force


@pytest.fixture
def cmj_series() -> ForceSeries:
    return make_series(cmj_force())


@pytest.fixture
def shallow_cmj_series() -> ForceSeries:
    return make_series(shallow_cmj_force())


@pytest.fixture
def squat_jump_series() -> ForceSeries:
    return make_series(squat_jump_force())


@pytest.fixture
def drop_jump_series() -> ForceSeries:
    return make_series(drop_jump_force())


@pytest.fixture
def imtp_series() -> ForceSeries:
    return make_series(imtp_force())


@pytest.fixture
def balance_series() -> ForceSeries:
    """30 s at 100 Hz; load shifts +/-10 N between feet with fixed per-foot COP."""
    sample_rate = 100.0
    t = np.arange(3000) / sample_rate
    shift = 10.0 * np.sin(2 * np.pi * 0.5 * t)
    n = len(t)
    left_cop = np.tile([-100.0, 0.0], (n, 1))
    right_cop = np.tile([100.0, 0.0], (n, 1))
    return ForceSeries(
        timestamps_ms=np.round(t * 1000.0).astype(np.int64),
        left=350.0 + shift,
        right=350.0 - shift,
        sample_rate_hz=sample_rate,
        left_cop=left_cop,
        right_cop=right_cop,
    )
