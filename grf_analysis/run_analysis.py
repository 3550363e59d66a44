"""Run the full analysis on an in-memory force capture (library entry point). No file I/O."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from .config import (
    DEFAULT_CONDITIONER_CONFIG,
    DEFAULT_QUALITY_CONFIG,
    ConditionerConfig,
    QualityConfig,
    TestTypeProfile,
    get_profile,
)
from .data import ForceSeries, MetricsResult, PhaseSegment, QualityAssessment, load_series_from_dict, validate_inputs
from .detect import detect_phases
from .errors import InputValidationError
from .physics import G, calculate
from .quality import assess
from .signal import condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Result bundle handed to persistence/reporting: metrics, phases and quality."""

    test_type: str
    body_weight_n: float
    sample_rate_hz: float
    metrics: MetricsResult
    phases: Tuple[PhaseSegment, ...]
    quality: QualityAssessment
    noisy: bool = False
    insufficient_samples: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data (JSON-serializable) view of the result."""
        sr = self.sample_rate_hz
        return {
            "test_type": self.test_type,
            "body_weight_n": self.body_weight_n,
            "sample_rate_hz": sr,
            "flags": {"noisy": self.noisy, "insufficient_samples": self.insufficient_samples},
            "phases": [
                {
                    "kind": p.kind.value,
                    "start_index": p.start_index,
                    "end_index": p.end_index,
                    "start_time_s": p.start_index / sr,
                    "end_time_s": p.end_index / sr,
                    "duration_s": p.duration_s(sr),
                }
                for p in self.phases
            ],
            "metrics": {k: float(v) for k, v in self.metrics.items()},
            "quality": {
                "score": self.quality.score,
                "grade": self.quality.grade,
                "reasons": list(self.quality.reasons),
                "recommended_actions": list(self.quality.recommended_actions),
            },
        }


def run_analysis(
    series: ForceSeries,
    body_weight_n: float,
    test_type: Union[str, TestTypeProfile],
    expected_duration_s: Optional[float] = None,
    conditioner_config: ConditionerConfig = DEFAULT_CONDITIONER_CONFIG,
    quality_config: QualityConfig = DEFAULT_QUALITY_CONFIG,
) -> AnalysisResult:
    """Condition -> detect phases -> calculate metrics -> assess quality.

    Args:
        series: Calibrated bilateral capture.
        body_weight_n: Athlete body weight (N); required, there is no default.
        test_type: Profile or test-type identifier (e.g. "CMJ", "IMTP", "QUIET_STAND").
        expected_duration_s: Expected capture length; the profile's default when None.

    Raises:
        InputValidationError: Invalid series, body weight or test type.
    """
    profile = test_type if isinstance(test_type, TestTypeProfile) else get_profile(test_type)
    validate_inputs(series, body_weight_n)

    conditioned = condition(series, conditioner_config)
    phases = detect_phases(conditioned, body_weight_n, profile)
    metrics = calculate(conditioned, phases, profile, body_weight_n)
    quality = assess(
        metrics,
        conditioned,
        expected_duration_s,
        profile,
        body_weight_n=body_weight_n,
        config=quality_config,
    )
    logger.info(
        "%s: %d samples, %d phases, %d metrics, quality %.0f",
        profile.name, len(series), len(phases), len(metrics), quality.score,
    )
    return AnalysisResult(
        test_type=profile.name,
        body_weight_n=float(body_weight_n),
        sample_rate_hz=series.sample_rate_hz,
        metrics=metrics,
        phases=tuple(phases),
        quality=quality,
        noisy=conditioned.noisy,
        insufficient_samples=conditioned.insufficient_samples,
    )


def run_analysis_from_dict(data: Dict[str, Any]) -> AnalysisResult:
    """Run the pipeline on a dict capture (see ``load_series_from_dict``).

    Besides the force arrays the dict needs ``test_type`` and either ``body_weight_n`` or
    ``athlete_mass_kg``. Optional: ``expected_duration_s``.

    Raises:
        InputValidationError: If required keys are missing or data is invalid.
    """
    if "test_type" not in data:
        raise InputValidationError("Missing required key: test_type")
    if data.get("body_weight_n") is not None:
        body_weight_n = float(data["body_weight_n"])
    elif data.get("athlete_mass_kg") is not None:
        body_weight_n = float(data["athlete_mass_kg"]) * G
    else:
        raise InputValidationError("Missing required key: body_weight_n or athlete_mass_kg")

    series = load_series_from_dict(data)
    expected = data.get("expected_duration_s")
    return run_analysis(
        series,
        body_weight_n,
        str(data["test_type"]),
        expected_duration_s=float(expected) if expected is not None else None,
    )
