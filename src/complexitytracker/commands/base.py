"""
Base command interface for ComplexityTracker CLI commands.
"""
import argparse
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any

from ..core.analyzer import AnalysisEngine
from ..exceptions import ConfigError
from ..progress_reporter import ProgressReporter
from ..services.configuration_service import ConfigurationService, ThresholdConfig

# Exit statuses
EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_CONFIG_ERROR = 2
EXIT_EMPTY_INPUT = 3
EXIT_CANCELLED = 130


@dataclass
class CommandContext:
    """Context passed to command handlers."""
    config_service: ConfigurationService
    args: Any  # argparse.Namespace


class BaseCommand(ABC):
    """Base class for all CLI commands."""

    def __init__(self, context: CommandContext):
        self.context = context
        self.config_service = context.config_service
        self.args = context.args

    @abstractmethod
    async def execute(self) -> int:
        """Execute the command.

        Returns:
            Exit code (0 for success)
        """
        pass

    @classmethod
    @abstractmethod
    def add_arguments(cls, parser):
        """Add command-specific arguments to the parser."""
        pass

    @classmethod
    @abstractmethod
    def help(cls) -> str:
        """Return help text for the command."""
        pass

    def thresholds(self) -> ThresholdConfig:
        """Configured limits with any command-line overrides applied.

        Raises:
            ConfigError: If a limit is not a positive integer
        """
        return self.config_service.with_threshold_overrides(
            cyclomatic_limit=getattr(self.args, 'cyclomatic_limit', None),
            cognitive_limit=getattr(self.args, 'cognitive_limit', None),
            nesting_limit=getattr(self.args, 'nesting_limit', None),
            line_limit=getattr(self.args, 'line_limit', None),
        )

    def create_engine(self, silent: bool = False) -> AnalysisEngine:
        """Build an analysis engine from configuration and arguments."""
        thresholds = self.thresholds()
        config = self.config_service.get_analysis_config()

        overrides = {}
        if getattr(self.args, 'include_tests', False):
            overrides['include_tests'] = True
        if getattr(self.args, 'no_gitignore', False):
            overrides['use_gitignore'] = False
        if getattr(self.args, 'no_suggestions', False):
            overrides['suggestions'] = False
        workers = getattr(self.args, 'workers', None)
        if workers is not None:
            if workers < 1:
                raise ConfigError(f"--workers must be at least 1, got {workers}")
            overrides['max_workers'] = workers
            overrides['parallel_processing'] = workers > 1

        return AnalysisEngine(
            thresholds=thresholds,
            config=replace(config, **overrides),
            progress_reporter=ProgressReporter(silent=silent),
        )


def add_threshold_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the complexity limit flags shared by the analysis commands."""
    group = parser.add_argument_group("limits")
    group.add_argument(
        "--cyclomatic-limit", type=int, metavar="N",
        help="Maximum cyclomatic complexity per function (default: 10)"
    )
    group.add_argument(
        "--cognitive-limit", type=int, metavar="N",
        help="Maximum cognitive complexity per function (default: 15)"
    )
    group.add_argument(
        "--nesting-limit", type=int, metavar="N",
        help="Maximum nesting depth per function (default: 3)"
    )
    group.add_argument(
        "--line-limit", type=int, metavar="N",
        help="Maximum lines per function (default: 50)"
    )


def add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    """Add file discovery and performance flags."""
    parser.add_argument(
        "--include-tests",
        action="store_true",
        help="Also scan test directories and test modules"
    )
    parser.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not honour .gitignore files"
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of files analyzed in parallel (default: CPU count)"
    )
