"""Main CLI entry point for ComplexityTracker using command pattern."""

import sys
import argparse
import asyncio
import logging
from typing import Optional

from . import __version__
from .commands import COMMAND_REGISTRY
from .commands.base import (
    CommandContext, EXIT_CANCELLED, EXIT_CONFIG_ERROR, EXIT_EMPTY_INPUT,
)
from .exceptions import ComplexityTrackerError, ConfigError, EmptyInputError
from .services.configuration_service import ConfigurationService, LOG_LEVELS
from .utils import OutputFormatter, setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="complexitytracker",
        description="ComplexityTracker - Cyclomatic and cognitive complexity analysis"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        help="Path to a JSON config file (default: .complexitytracker.json if present)"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: from config, WARNING)"
    )

    # Create subparsers for commands
    subparsers = parser.add_subparsers(
        title="Available commands",
        dest="command",
        required=True
    )

    for name, command_class in COMMAND_REGISTRY.items():
        subparser = subparsers.add_parser(name, help=command_class.help())
        command_class.add_arguments(subparser)

    return parser, COMMAND_REGISTRY


async def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser, commands = create_parser()
    args = parser.parse_args(argv)

    config_service = ConfigurationService(args.config)
    try:
        config = config_service.get_config()
    except ConfigError as e:
        print(OutputFormatter.error(str(e)), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    level = args.log_level or ("DEBUG" if config.debug_mode else config.log_level)
    setup_logging(level)

    # Create command context
    context = CommandContext(
        config_service=config_service,
        args=args
    )

    # Execute command
    command_class = commands[args.command]
    command = command_class(context)

    try:
        return await command.execute()
    except (KeyboardInterrupt, asyncio.CancelledError):
        print("\nOperation cancelled by user", file=sys.stderr)
        return EXIT_CANCELLED
    except ConfigError as e:
        print(OutputFormatter.error(str(e)), file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except EmptyInputError as e:
        for failure in e.failures:
            print(OutputFormatter.failure_line(failure))
        print(OutputFormatter.warning(f"Nothing to check: {e}"))
        return EXIT_EMPTY_INPUT
    except ComplexityTrackerError as e:
        print(OutputFormatter.error(str(e)), file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logging.error(f"❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return 1


def cli_main():
    """Synchronous CLI entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    cli_main()
