from .config import PROFILES, ConditionerConfig, QualityConfig, TestFamily, TestTypeProfile, get_profile
from .data import (
    ConditionedSeries,
    ForceSample,
    ForceSeries,
    PhaseKind,
    PhaseSegment,
    QualityAssessment,
    load_series,
    load_series_from_dict,
)
from .detect import detect_phases
from .errors import InputValidationError
from .physics import asymmetry_index_pct, calculate
from .quality import assess
from .run_analysis import AnalysisResult, run_analysis, run_analysis_from_dict
from .signal import condition

__all__ = [
    "PROFILES",
    "AnalysisResult",
    "ConditionedSeries",
    "ConditionerConfig",
    "ForceSample",
    "ForceSeries",
    "InputValidationError",
    "PhaseKind",
    "PhaseSegment",
    "QualityAssessment",
    "QualityConfig",
    "TestFamily",
    "TestTypeProfile",
    "assess",
    "asymmetry_index_pct",
    "calculate",
    "condition",
    "detect_phases",
    "get_profile",
    "load_series",
    "load_series_from_dict",
    "run_analysis",
    "run_analysis_from_dict",
]
