from .load import load_series, load_series_from_dict
from .types import (
    ConditionedSeries,
    ForceSample,
    ForceSeries,
    MetricsResult,
    PhaseKind,
    PhaseSegment,
    QualityAssessment,
)
from .validation import validate_inputs, validate_series

__all__ = [
    "load_series",
    "load_series_from_dict",
    "ConditionedSeries",
    "ForceSample",
    "ForceSeries",
    "MetricsResult",
    "PhaseKind",
    "PhaseSegment",
    "QualityAssessment",
    "validate_inputs",
    "validate_series",
]
