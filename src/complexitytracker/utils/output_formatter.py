"""
Text and JSON rendering of analysis reports for the CLI.
"""

import json
from typing import Any, Dict, List, Optional

from ..exceptions import ParseError
from ..models import FunctionResult, MetricRecord, PatternSuggestion
from ..result_aggregator import Report


class OutputFormatter:
    """Formats reports, messages and per-function details for the terminal."""

    ICONS = {
        'search': '🔍',
        'stats': '📊',
        'warning': '⚠️',
        'success': '✅',
        'error': '❌',
        'function': '⚙️',
    }

    @classmethod
    def icon(cls, icon_type: str) -> str:
        """Get icon for the given type."""
        return cls.ICONS.get(icon_type, '')

    @classmethod
    def header(cls, text: str, icon_type: Optional[str] = None) -> str:
        """Format a section header."""
        icon = cls.icon(icon_type) + ' ' if icon_type else ''
        return f"\n{icon}{text}"

    @classmethod
    def item(cls, text: str, level: int = 1, bullet: str = '•') -> str:
        """Format a list item."""
        indent = '   ' * level
        return f"{indent}{bullet} {text}"

    @classmethod
    def summary_section(cls, title: str, items: Dict[str, Any]) -> str:
        """Format a summary section with key-value pairs."""
        lines = [cls.header(title, 'stats')]

        for key, value in items.items():
            lines.append(f"   {key}: {value}")

        return '\n'.join(lines)

    @classmethod
    def json_output(cls, data: Any, indent: int = 2) -> str:
        """Format data as JSON."""
        return json.dumps(data, indent=indent, default=str)

    @classmethod
    def error(cls, message: str) -> str:
        """Format an error message."""
        return f"{cls.icon('error')} Error: {message}"

    @classmethod
    def warning(cls, message: str) -> str:
        """Format a warning message."""
        return f"{cls.icon('warning')} Warning: {message}"

    @classmethod
    def success(cls, message: str) -> str:
        """Format a success message."""
        return f"{cls.icon('success')} {message}"

    @classmethod
    def format_file_path(cls, file_path: Optional[str], line_number: Optional[int] = None) -> str:
        """Format a file path with optional line number."""
        file_path = file_path or '<string>'
        if line_number:
            return f"{file_path}:{line_number}"
        return file_path

    # Report lines

    @classmethod
    def function_line(cls, record: MetricRecord) -> str:
        """``path:line: name cyclomatic=N cognitive=M``"""
        unit = record.function
        location = cls.format_file_path(unit.file_path, unit.start_line)
        return (f"{location}: {unit.qualified_name} "
                f"cyclomatic={record.cyclomatic_complexity} cognitive={record.cognitive_complexity}")

    @classmethod
    def suggestion_line(cls, suggestion: PatternSuggestion) -> str:
        return (f"    -> {suggestion.pattern.value} (lines {suggestion.start_line}-{suggestion.end_line}): "
                f"cyclomatic {suggestion.before.cyclomatic}->{suggestion.after.cyclomatic}, "
                f"cognitive {suggestion.before.cognitive}->{suggestion.after.cognitive}: "
                f"{suggestion.rationale}")

    @classmethod
    def failure_line(cls, failure: ParseError) -> str:
        message = f"{failure.unit_name}: {failure.message}" if failure.unit_name else failure.message
        return f"{failure.location()}: parse error: {message}"

    @classmethod
    def average_line(cls, report: Report) -> str:
        return f"average cyclomatic={report.average_cyclomatic:.2f}"

    @classmethod
    def exceeded_text(cls, result: FunctionResult) -> str:
        record = result.record
        values = {
            'cyclomatic': record.cyclomatic_complexity,
            'cognitive': record.cognitive_complexity,
            'nesting': record.max_nesting_depth,
            'lines': record.line_count,
        }
        return ', '.join(f"{name}={values[name]}" for name in result.exceeded)

    @classmethod
    def render_report(cls, report: Report, show_all: bool = False,
                      show_average: bool = False, show_suggestions: bool = True) -> List[str]:
        """
        Render a report as text lines.

        Args:
            report: Report to render
            show_all: List within-limit functions too
            show_average: Append the mean cyclomatic score
            show_suggestions: List suggestions under flagged functions

        Returns:
            Output lines, over-threshold functions first by complexity
        """
        lines = []
        for result in (report.results if show_all else report.violations):
            lines.append(cls.function_line(result.record))
            if show_suggestions and result.exceeded:
                lines.extend(cls.suggestion_line(s) for s in result.suggestions)

        lines.extend(cls.failure_line(failure) for failure in report.failures)

        if show_average:
            lines.append(cls.average_line(report))
        return lines

    @classmethod
    def render_summary(cls, report: Report) -> str:
        thresholds = report.thresholds
        summary = cls.summary_section("Summary:", {
            "Files analyzed": report.files_analyzed,
            "Functions analyzed": report.analyzed_units,
            "Over threshold": len(report.violations),
            "Parse errors": len(report.failures),
            "Limits": (f"cyclomatic={thresholds.cyclomatic_limit} cognitive={thresholds.cognitive_limit} "
                       f"nesting={thresholds.nesting_limit} lines={thresholds.line_limit}"),
        })
        if report.cancelled:
            return summary + "\n" + cls.warning("analysis was cancelled; results are partial")
        if report.violations:
            return summary + "\n" + cls.warning(f"{len(report.violations)} functions exceed the limits")
        return summary + "\n" + cls.success("All functions are within the limits")

    @classmethod
    def render_details(cls, result: FunctionResult) -> List[str]:
        """Per-function explain view: metrics, cognitive increments and suggestions."""
        record = result.record
        unit = record.function
        lines = [
            cls.header(f"{unit.qualified_name} ({cls.format_file_path(unit.file_path, unit.start_line)})",
                       'function'),
            (f"   cyclomatic={record.cyclomatic_complexity} cognitive={record.cognitive_complexity} "
             f"nesting={record.max_nesting_depth} lines={record.line_count}"),
        ]
        if result.exceeded:
            lines.append("   " + cls.warning(f"over limit: {cls.exceeded_text(result)}"))
        for increment in record.increments:
            lines.append(cls.item(f"line {increment.line}: +{increment.amount} {increment.reason}"))
        lines.extend(cls.suggestion_line(s) for s in result.suggestions)
        return lines
