"""
Utility modules for ComplexityTracker.
"""

from .logging_setup import setup_logging
from .output_formatter import OutputFormatter

__all__ = [
    'setup_logging',
    'OutputFormatter'
]
