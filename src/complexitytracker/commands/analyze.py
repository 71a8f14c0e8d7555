"""
Analyze command implementation for ComplexityTracker CLI.
"""
import asyncio
import functools

from ..utils import OutputFormatter
from .base import BaseCommand, EXIT_OK, add_threshold_arguments


class AnalyzeCommand(BaseCommand):
    """Command to explain the scores of every function in a file or snippet."""

    async def execute(self) -> int:
        """Execute the analyze command."""
        args = self.args
        engine = self.create_engine(silent=True)

        if args.code is not None:
            work = functools.partial(engine.analyze_source, args.code, file_path=args.file_path)
        else:
            work = functools.partial(engine.analyze_paths, [args.path])

        if not args.json:
            print(f"{OutputFormatter.icon('search')} Analyzing code structure...")

        try:
            report = await asyncio.to_thread(work)
        except (KeyboardInterrupt, asyncio.CancelledError):
            engine.cancel()
            raise

        if args.json:
            print(OutputFormatter.json_output(report.to_dict(include_all=True)))
            return EXIT_OK

        # Source order reads better than ranking here
        results = sorted(report.results, key=lambda r: (r.function.file_path or "", r.function.start_line))
        for result in results:
            for line in OutputFormatter.render_details(result):
                print(line)

        if report.failures:
            print(OutputFormatter.header("Parse errors:", 'error'))
            for failure in report.failures:
                print(OutputFormatter.failure_line(failure))

        print()
        print(OutputFormatter.average_line(report))
        print(OutputFormatter.render_summary(report))
        return EXIT_OK

    @classmethod
    def help(cls) -> str:
        return "Show metrics, cognitive increments and suggestions for every function"

    @classmethod
    def add_arguments(cls, parser):
        """Add command-specific arguments to the parser."""
        source = parser.add_mutually_exclusive_group(required=True)
        source.add_argument(
            "path",
            nargs="?",
            help="File or directory to analyze"
        )
        source.add_argument(
            "--code", "-c",
            help="Source code to analyze"
        )
        parser.add_argument(
            "--file-path", "-F",
            help="File path for context when using --code"
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the report as JSON"
        )
        add_threshold_arguments(parser)
