"""
Batch analysis engine.

Runs parse, scoring and advice for every function unit of a batch of
sources, in parallel across files, and hands the results to the
aggregator.
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ...ast_analysis import ASTAnalyzer, ParsedModule
from ...exceptions import EmptyInputError, ParseError
from ...models import FunctionResult, FunctionUnit
from ...progress_reporter import ProgressReporter
from ...refactoring_advisor import PatternAdvisor
from ...result_aggregator import Report, ResultAggregator
from ...services.configuration_service import AnalysisConfig, ThresholdConfig
from ...services.file_scan_service import FileScanService
from ..metrics import MetricsCalculator

logger = logging.getLogger(__name__)

SourceLoader = Callable[[], ParsedModule]


@dataclass
class _FileOutcome:
    results: List[FunctionResult] = field(default_factory=list)
    failures: List[ParseError] = field(default_factory=list)


class AnalysisEngine:
    """
    Analyzes batches of Python sources.

    Units share nothing mutable apart from the read-only thresholds, so
    files are analyzed concurrently. :meth:`cancel` stops the batch between
    two function units; results produced before that are kept.
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None,
                 config: Optional[AnalysisConfig] = None,
                 progress_reporter: Optional[ProgressReporter] = None):
        """
        Initialize the engine.

        Args:
            thresholds: Limits for this run (default: 10/15/3/50)
            config: Discovery, parallelism and advisor settings
            progress_reporter: Reporter for file progress (default: silent)
        """
        self.thresholds = thresholds or ThresholdConfig()
        self.config = config or AnalysisConfig()
        self.progress_reporter = progress_reporter or ProgressReporter(silent=True)
        self.analyzer = ASTAnalyzer()
        self.calculator = MetricsCalculator()
        self.advisor = PatternAdvisor(self.thresholds, self.calculator)
        self.aggregator = ResultAggregator(self.thresholds)
        self.file_scanner = FileScanService(
            include_tests=self.config.include_tests,
            use_gitignore=self.config.use_gitignore,
        )
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Signal the running batch to stop after the current unit."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def analyze_source(self, source_code: str, file_path: Optional[str] = None) -> Report:
        """
        Analyze one module given as text.

        Raises:
            EmptyInputError: If the source holds no analyzable function
        """
        return self._run([lambda: self.analyzer.parse_code(source_code, file_path)])

    def analyze_files(self, files: Sequence[Union[str, Path]]) -> Report:
        """
        Analyze a list of source files.

        Raises:
            EmptyInputError: If no file yields an analyzable function
        """
        loaders = [self._file_loader(str(path)) for path in files]
        return self._run(loaders)

    def analyze_paths(self, paths: Sequence[str]) -> Report:
        """
        Discover Python files under the given files or directories and analyze them.

        Raises:
            ComplexityTrackerError: If a path does not exist
            EmptyInputError: If nothing analyzable is found
        """
        files = self.file_scanner.find_all(paths, self.config.file_pattern)
        logger.info(f"Analyzing {len(files)} files")
        return self.analyze_files(files)

    def analyze_unit(self, unit: FunctionUnit) -> FunctionResult:
        """
        Score one function unit and collect its suggestions.

        Raises:
            ParseError: If the unit is too deeply nested to score
        """
        try:
            record = self.calculator.measure(unit)
        except RecursionError as e:
            raise ParseError("function body nested too deeply to analyze",
                             file_path=unit.file_path, line=unit.start_line,
                             unit_name=unit.qualified_name) from e

        suggestions = ()
        if self.config.suggestions:
            try:
                suggestions = tuple(self.advisor.advise(unit, record))
            except RecursionError:
                logger.warning(f"Skipping suggestions for {unit.qualified_name}: nesting too deep")
        return FunctionResult(record=record, suggestions=suggestions)

    def _file_loader(self, path: str) -> SourceLoader:
        return lambda: self.analyzer.parse_file(path)

    def _run(self, loaders: List[SourceLoader]) -> Report:
        self._cancel_event.clear()
        outcomes = self._collect(loaders)

        results = [result for outcome in outcomes for result in outcome.results]
        failures = [failure for outcome in outcomes for failure in outcome.failures]
        failures.sort(key=lambda e: (e.file_path or "", e.line or 0))
        cancelled = self.cancelled

        if not results and not cancelled:
            raise EmptyInputError("no analyzable functions found", failures=failures)

        if cancelled:
            logger.warning(f"Analysis cancelled after {len(results)} functions")
        return self.aggregator.aggregate(results, failures, files_analyzed=len(loaders), cancelled=cancelled)

    def _collect(self, loaders: List[SourceLoader]) -> List[_FileOutcome]:
        total = len(loaders)
        self.progress_reporter.start(total)
        workers = min(self.config.max_workers, total) if self.config.parallel_processing else 1

        if workers <= 1:
            outcomes = []
            for load in loaders:
                if self.cancelled:
                    break
                outcomes.append(self._analyze_module(load))
                self._report_file(outcomes[-1])
            return outcomes

        outcomes = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._analyze_module, load) for load in loaders]
            try:
                for future in concurrent.futures.as_completed(futures):
                    outcomes.append(future.result())
                    self._report_file(outcomes[-1])
            except KeyboardInterrupt:
                # let the workers stop at their next unit boundary
                self.cancel()
                raise
        return outcomes

    def _report_file(self, outcome: _FileOutcome) -> None:
        self.progress_reporter.file_done(len(outcome.results), len(outcome.failures))

    def _analyze_module(self, load: SourceLoader) -> _FileOutcome:
        outcome = _FileOutcome()
        if self.cancelled:
            return outcome

        try:
            parsed = load()
        except ParseError as e:
            logger.warning(f"Parse error: {e}")
            outcome.failures.append(e)
            return outcome

        outcome.failures.extend(parsed.failures)
        for unit in parsed.units:
            if self.cancelled:
                break
            try:
                outcome.results.append(self.analyze_unit(unit))
            except ParseError as e:
                logger.warning(f"Parse error: {e}")
                outcome.failures.append(e)
        return outcome
