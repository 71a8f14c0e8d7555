"""
Exception classes for ComplexityTracker.
"""

from typing import List, Optional


class ComplexityTrackerError(Exception):
    """Base exception for all ComplexityTracker errors."""
    pass


class ParseError(ComplexityTrackerError):
    """Raised when a source file or function unit cannot be parsed or lowered.

    Parse errors are isolated per unit: the engine records them in the
    report and carries on with the rest of the batch.
    """

    def __init__(self, message: str, file_path: Optional[str] = None,
                 line: Optional[int] = None, unit_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.line = line
        self.unit_name = unit_name

    def location(self) -> str:
        """Return a ``path:line`` location string for reporting."""
        path = self.file_path or "<string>"
        return f"{path}:{self.line or 0}"

    def __str__(self) -> str:
        if self.unit_name:
            return f"{self.location()}: {self.unit_name}: {self.message}"
        return f"{self.location()}: {self.message}"


class ConfigError(ComplexityTrackerError):
    """Exception raised for invalid configuration (fatal, before analysis)."""
    pass


class EmptyInputError(ComplexityTrackerError):
    """Exception raised when a run finds no analyzable function units.

    ``failures`` holds the parse errors that left nothing to analyze, so
    they can still be reported.
    """

    def __init__(self, message: str, failures: Optional[List[ParseError]] = None):
        super().__init__(message)
        self.failures = list(failures or [])
