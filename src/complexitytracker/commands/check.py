"""
Check command: flag functions that exceed the complexity limits.
"""

import argparse
import asyncio

from ..utils import OutputFormatter
from .base import (
    BaseCommand, EXIT_OK, EXIT_VIOLATIONS, add_scan_arguments, add_threshold_arguments,
)


class CheckCommand(BaseCommand):
    """Analyze sources and report functions over the configured limits."""

    @classmethod
    def help(cls) -> str:
        """Return help text for the check command."""
        return "Check functions against complexity limits"

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        """Add command-specific arguments."""
        parser.add_argument(
            "paths",
            nargs="*",
            default=["."],
            help="Files or directories to analyze (default: current directory)"
        )
        add_threshold_arguments(parser)
        parser.add_argument(
            "--average",
            action="store_true",
            help="Also print the mean cyclomatic complexity of all functions"
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="List every function, not only those over a limit"
        )
        parser.add_argument(
            "--no-suggestions",
            action="store_true",
            help="Do not compute refactoring suggestions"
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the report as JSON"
        )
        add_scan_arguments(parser)

    async def execute(self) -> int:
        """Execute the check command."""
        args = self.args
        engine = self.create_engine(silent=args.json)

        if not args.json:
            print(f"{OutputFormatter.icon('search')} Checking {', '.join(args.paths)}...")

        try:
            report = await asyncio.to_thread(engine.analyze_paths, args.paths)
        except (KeyboardInterrupt, asyncio.CancelledError):
            engine.cancel()
            raise

        if args.json:
            data = report.to_dict(include_all=args.all)
            print(OutputFormatter.json_output(data))
        else:
            lines = OutputFormatter.render_report(
                report,
                show_all=args.all,
                show_average=args.average,
                show_suggestions=not args.no_suggestions,
            )
            for line in lines:
                print(line)
            print(OutputFormatter.render_summary(report))

        return EXIT_VIOLATIONS if report.has_violations else EXIT_OK
