"""ComplexityTracker - Cyclomatic and cognitive complexity analysis with refactoring advice."""

__version__ = "0.1.0"

from .models import FunctionUnit, MetricRecord, PatternKind, PatternSuggestion
from .core.analyzer import AnalysisEngine
from .result_aggregator import Report
from .services.configuration_service import ThresholdConfig
from .exceptions import ComplexityTrackerError, ConfigError, EmptyInputError, ParseError

__all__ = [
    "AnalysisEngine",
    "FunctionUnit",
    "MetricRecord",
    "PatternKind",
    "PatternSuggestion",
    "Report",
    "ThresholdConfig",
    "ComplexityTrackerError",
    "ConfigError",
    "EmptyInputError",
    "ParseError",
]
