from __future__ import annotations

import json

import numpy as np
import pytest

from grf_analysis import ForceSample, ForceSeries, InputValidationError, load_series, load_series_from_dict
from grf_analysis.data import validate_inputs


def _capture(n: int = 10) -> dict:
    return {
        "left_force": [350.0] * n,
        "right_force": [340.0] * n,
        "sample_rate": 1000,
    }


def test_from_dict_synthesizes_timestamps() -> None:
    series = load_series_from_dict(_capture())

    assert len(series) == 10
    assert series.sample_rate_hz == 1000.0
    np.testing.assert_array_equal(series.timestamps_ms, np.arange(10))
    np.testing.assert_allclose(series.total, 690.0)
    assert not series.has_cop


def test_sample_rate_from_duration() -> None:
    data = _capture(500)
    del data["sample_rate"]
    data["test_duration"] = 2.5

    assert load_series_from_dict(data).sample_rate_hz == 200.0


def test_cop_with_missing_samples() -> None:
    data = _capture(3)
    data["left_cop"] = [[1.0, 2.0], None, [3.0, 4.0]]

    series = load_series_from_dict(data)

    assert series.left_cop.shape == (3, 2)
    assert np.isnan(series.left_cop[1]).all()
    assert series.right_cop is None


@pytest.mark.parametrize("key", ["left_force", "right_force", "sample_rate"])
def test_missing_keys(key: str) -> None:
    data = _capture()
    del data[key]

    with pytest.raises(InputValidationError, match="Missing required keys"):
        load_series_from_dict(data)


def test_length_mismatch() -> None:
    data = _capture()
    data["right_force"] = data["right_force"][:-1]

    with pytest.raises(InputValidationError):
        load_series_from_dict(data)


def test_load_series_from_file(tmp_path) -> None:
    path = tmp_path / "capture.json"
    path.write_text(json.dumps(_capture(20)), encoding="utf-8")

    series = load_series(path)

    assert len(series) == 20


def test_load_series_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_series(tmp_path / "nope.json")


def test_series_arrays_are_read_only() -> None:
    series = load_series_from_dict(_capture())

    with pytest.raises(ValueError):
        series.left[0] = 0.0


def test_from_samples() -> None:
    samples = [
        ForceSample(timestamp_ms=i, left_grf=300.0, right_grf=310.0, left_cop=(1.0, 2.0) if i else None)
        for i in range(5)
    ]

    series = ForceSeries.from_samples(samples, sample_rate_hz=1000.0)

    assert samples[0].total_grf == 610.0
    assert series.right_cop is None
    assert np.isnan(series.left_cop[0]).all()
    np.testing.assert_allclose(series.left_cop[1], [1.0, 2.0])


def test_unordered_timestamps_rejected() -> None:
    data = _capture(3)
    data["timestamps_ms"] = [0, 2, 1]

    with pytest.raises(InputValidationError, match="strictly increasing"):
        validate_inputs(load_series_from_dict(data), 700.0)


@pytest.mark.parametrize("body_weight", [None, 0.0, -700.0, float("nan")])
def test_invalid_body_weight(body_weight) -> None:
    with pytest.raises(InputValidationError):
        validate_inputs(load_series_from_dict(_capture()), body_weight)
