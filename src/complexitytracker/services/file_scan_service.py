"""
File scanning service for ComplexityTracker.
Handles file discovery and filtering ahead of analysis.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..ignore_patterns import IgnorePatterns
from ..exceptions import ComplexityTrackerError


class FileScanService:
    """Service for discovering source files to analyze."""

    def __init__(self, include_tests: bool = False, use_gitignore: bool = True,
                 logger: Optional[logging.Logger] = None):
        """Initialize the file scan service.

        Args:
            include_tests: Whether test modules are scanned in directories
            use_gitignore: Whether .gitignore files are honoured
            logger: Optional logger instance
        """
        self.include_tests = include_tests
        self.use_gitignore = use_gitignore
        self.logger = logger or logging.getLogger(__name__)

    def find_files(self, path: str, pattern: str = "*.py") -> List[Path]:
        """Find all files matching the pattern in the given path.

        An explicitly named file is always returned, whatever its name.

        Args:
            path: Directory or file path to scan
            pattern: File pattern to match (default: *.py)

        Returns:
            Sorted list of Path objects for matching files

        Raises:
            ComplexityTrackerError: If the path does not exist
        """
        path_obj = Path(path)

        if path_obj.is_file():
            return [path_obj]

        if not path_obj.is_dir():
            raise ComplexityTrackerError(f"Path not found: {path}")

        ignore_patterns = IgnorePatterns(
            str(path_obj),
            use_gitignore=self.use_gitignore,
            include_tests=self.include_tests,
        )

        all_files = [
            file_path for file_path in path_obj.rglob(pattern)
            if file_path.is_file() and not ignore_patterns.should_ignore(file_path)
        ]
        # Sort files for consistent ordering
        all_files.sort()

        self.logger.info(f"Found {len(all_files)} {pattern} files in {path}")
        return all_files

    def find_all(self, paths: Iterable[str], pattern: str = "*.py") -> List[Path]:
        """Find files under several paths, dropping repeats."""
        seen = set()
        files = []
        for path in paths:
            for file_path in self.find_files(path, pattern):
                key = file_path.resolve()
                if key not in seen:
                    seen.add(key)
                    files.append(file_path)
        return files
