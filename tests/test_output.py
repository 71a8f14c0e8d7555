"""
Tests for report formatting and progress output.
"""

import io
import logging

from complexitytracker.core.analyzer import AnalysisEngine
from complexitytracker.exceptions import ParseError
from complexitytracker.progress_reporter import ProgressReporter
from complexitytracker.services.configuration_service import AnalysisConfig, ThresholdConfig
from complexitytracker.utils import OutputFormatter, setup_logging
from complexitytracker.utils.logging_setup import ShortNameFormatter

CODE = '''
def nested(items):
    if items:
        for item in items:
            if item:
                print(item)

def flat(a):
    return a
'''


class TestOutputFormatter:
    """Test OutputFormatter functionality."""

    def setup_method(self):
        """Set up test environment."""
        engine = AnalysisEngine(
            thresholds=ThresholdConfig(nesting_limit=2),
            config=AnalysisConfig(parallel_processing=False),
        )
        self.report = engine.analyze_source(CODE, "module.py")

    def test_function_line(self):
        line = OutputFormatter.function_line(self.report.violations[0].record)
        assert line == "module.py:2: nested cyclomatic=4 cognitive=6"

    def test_suggestion_line(self):
        suggestion = self.report.violations[0].suggestions[0]
        line = OutputFormatter.suggestion_line(suggestion)
        assert line.startswith(f"    -> {suggestion.pattern.value} (lines ")
        assert f"cyclomatic 4->{suggestion.after.cyclomatic}" in line

    def test_failure_line(self):
        failure = ParseError("nested too deeply", file_path="a.py", line=7, unit_name="deep")
        assert OutputFormatter.failure_line(failure) == "a.py:7: parse error: deep: nested too deeply"

    def test_render_report_lists_violations_only(self):
        lines = OutputFormatter.render_report(self.report)
        assert lines[0] == "module.py:2: nested cyclomatic=4 cognitive=6"
        assert not any(line.startswith("module.py:8: flat ") for line in lines)
        assert any(line.startswith("    -> ") for line in lines)

    def test_render_report_all_with_average(self):
        lines = OutputFormatter.render_report(self.report, show_all=True, show_average=True,
                                              show_suggestions=False)
        assert lines == [
            "module.py:2: nested cyclomatic=4 cognitive=6",
            "module.py:8: flat cyclomatic=1 cognitive=0",
            "average cyclomatic=2.50",
        ]

    def test_render_summary(self):
        summary = OutputFormatter.render_summary(self.report)
        assert "Functions analyzed: 2" in summary
        assert "cyclomatic=10 cognitive=15 nesting=2 lines=50" in summary
        assert "1 functions exceed the limits" in summary

    def test_render_details(self):
        lines = OutputFormatter.render_details(self.report.violations[0])
        assert "nesting=3" in lines[1]
        assert any("over limit: nesting=3" in line for line in lines)
        assert any("line 5: +3 if (nesting=2)" in line for line in lines)

    def test_format_file_path(self):
        assert OutputFormatter.format_file_path(None, 3) == "<string>:3"
        assert OutputFormatter.format_file_path("a.py") == "a.py"


class TestProgressReporter:
    """Test ProgressReporter functionality."""

    def test_silent_reporter(self):
        stream = io.StringIO()
        reporter = ProgressReporter(silent=True, min_files=1, stream=stream)
        reporter.start(3)
        reporter.file_done(4)
        assert stream.getvalue() == ""

    def test_small_batches_are_not_reported(self):
        stream = io.StringIO()
        reporter = ProgressReporter(min_files=10, stream=stream)
        reporter.start(5)
        for _ in range(5):
            reporter.file_done(2)
        assert stream.getvalue() == ""

    def test_first_and_last_file_are_reported(self):
        stream = io.StringIO()
        reporter = ProgressReporter(interval_seconds=3600, min_files=1, stream=stream)
        reporter.start(10)
        for index in range(10):
            reporter.file_done(3, failures=1 if index == 4 else 0)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("   [1/10 files] 3 functions (10%)")
        assert lines[1] == "   [10/10 files] 30 functions, 1 parse errors (100%)"

    def test_start_resets_totals(self):
        reporter = ProgressReporter(silent=True)
        reporter.start(2)
        reporter.file_done(5, failures=2)
        reporter.start(4)
        assert (reporter.files_done, reporter.functions, reporter.failures) == (0, 0, 0)
        assert reporter.format_status() == "   [0/4 files] 0 functions (0%)"

    def test_engine_feeds_reporter(self):
        stream = io.StringIO()
        reporter = ProgressReporter(min_files=1, stream=stream)
        engine = AnalysisEngine(config=AnalysisConfig(parallel_processing=False), progress_reporter=reporter)
        engine.analyze_source(CODE, "module.py")

        assert (reporter.files_done, reporter.functions) == (1, 2)
        assert stream.getvalue() == "   [1/1 files] 2 functions (100%)\n"


class TestLoggingSetup:
    """Test logging configuration."""

    def setup_method(self):
        self.root = logging.getLogger()
        self.saved = (self.root.level, list(self.root.handlers))

    def teardown_method(self):
        self.root.setLevel(self.saved[0])
        self.root.handlers = self.saved[1]
        logging.getLogger('complexitytracker.refactoring_advisor').setLevel(logging.NOTSET)

    def test_info_level_prints_bare_messages(self):
        root = setup_logging("info")
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == '%(message)s'
        assert logging.getLogger('complexitytracker.refactoring_advisor').level == logging.WARNING

    def test_debug_level_keeps_module_loggers(self):
        root = setup_logging("DEBUG")
        assert "%(threadName)s" in root.handlers[0].formatter._fmt
        assert logging.getLogger('complexitytracker.refactoring_advisor').level == logging.NOTSET

    def test_short_name(self):
        formatter = ShortNameFormatter('%(short_name)s: %(message)s')
        record = logging.LogRecord("complexitytracker.core.analyzer.engine", logging.INFO,
                                   __file__, 1, "done", None, None)
        assert formatter.format(record) == "engine: done"
