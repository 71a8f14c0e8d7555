"""
Command handlers for ComplexityTracker CLI.
"""
from .base import BaseCommand, CommandContext
from .check import CheckCommand
from .analyze import AnalyzeCommand
from .serve import ServeCommand

__all__ = [
    'BaseCommand',
    'CommandContext',
    'CheckCommand',
    'AnalyzeCommand',
    'ServeCommand',
]

# Command registry
COMMAND_REGISTRY = {
    'check': CheckCommand,
    'analyze': AnalyzeCommand,
    'serve': ServeCommand,
}
