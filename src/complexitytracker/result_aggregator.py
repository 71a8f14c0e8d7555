"""Result aggregation and threshold filtering for complexity analysis."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .exceptions import ParseError
from .models import FunctionResult
from .services.configuration_service import ThresholdConfig


@dataclass
class Report:
    """Outcome of one analysis run."""
    results: List[FunctionResult]
    violations: List[FunctionResult]
    failures: List[ParseError] = field(default_factory=list)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    files_analyzed: int = 0
    cancelled: bool = False

    @property
    def analyzed_units(self) -> int:
        return len(self.results)

    @property
    def average_cyclomatic(self) -> float:
        """Arithmetic mean cyclomatic complexity over all analyzed units."""
        if not self.results:
            return 0.0
        return sum(r.record.cyclomatic_complexity for r in self.results) / len(self.results)

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)

    def to_dict(self, include_all: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "summary": ResultAggregator.summarize(self),
            "violations": [result.to_dict() for result in self.violations],
            "failures": [
                {"location": failure.location(), "function": failure.unit_name, "message": failure.message}
                for failure in self.failures
            ],
        }
        if include_all:
            data["functions"] = [result.to_dict() for result in self.results]
        return data


class ResultAggregator:
    """Filters per-function results against thresholds and orders them."""

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        """Initialize result aggregator."""
        self.thresholds = thresholds or ThresholdConfig()

    def aggregate(
        self,
        results: List[FunctionResult],
        failures: Optional[List[ParseError]] = None,
        files_analyzed: int = 0,
        cancelled: bool = False
    ) -> Report:
        """
        Build the report for a batch of results.

        Args:
            results: Per-function results in any order
            failures: Parse errors collected during the run
            files_analyzed: Number of source files read
            cancelled: Whether the run stopped early

        Returns:
            Report listing all functions and the over-threshold ones,
            most complex first
        """
        marked = [self._mark(result) for result in results]
        # file/line order first so the complexity sort below is stable on it
        marked.sort(key=lambda r: (r.function.file_path or "", r.function.start_line))
        ranked = sorted(
            marked,
            key=lambda r: (r.record.cyclomatic_complexity, r.record.cognitive_complexity),
            reverse=True,
        )
        # reverse=True keeps equal keys in their original order
        violations = [result for result in ranked if result.exceeded]

        return Report(
            results=ranked,
            violations=violations,
            failures=list(failures or []),
            thresholds=self.thresholds,
            files_analyzed=files_analyzed,
            cancelled=cancelled,
        )

    def _mark(self, result: FunctionResult) -> FunctionResult:
        record = result.record
        exceeded = self.thresholds.exceeded_by(
            record.cyclomatic_complexity,
            record.cognitive_complexity,
            record.max_nesting_depth,
            record.line_count,
        )
        return replace(result, exceeded=tuple(exceeded))

    @staticmethod
    def summarize(report: Report) -> Dict[str, Any]:
        """Generate the summary section of a report."""
        return {
            "files_analyzed": report.files_analyzed,
            "analyzed_units": report.analyzed_units,
            "violations": len(report.violations),
            "parse_errors": len(report.failures),
            "average_cyclomatic": round(report.average_cyclomatic, 2),
            "cancelled": report.cancelled,
            "thresholds": {
                "cyclomatic": report.thresholds.cyclomatic_limit,
                "cognitive": report.thresholds.cognitive_limit,
                "nesting": report.thresholds.nesting_limit,
                "lines": report.thresholds.line_limit,
            },
        }
