"""
Ignore patterns for ComplexityTracker.
Handles .complexityignore files, .gitignore files and default exclusions.
"""

import fnmatch
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

IGNORE_FILE = ".complexityignore"
TEST_DIRS = frozenset({'test', 'tests', 'testing', '__test__', '__tests__'})

# Virtual environments, caches and build output never hold project code
DEFAULT_PATTERNS = (
    ".venv/", "venv/", "env/", ".env/", ".conda/",
    "__pycache__/", "*.egg-info/", "*.dist-info/", "site-packages/",
    "build/", "dist/", "docs/_build/",
    ".tox/", ".nox/", ".pytest_cache/", ".mypy_cache/", ".ruff_cache/",
    "node_modules/", ".git/", ".hg/", ".svn/", ".idea/", ".vscode/",
)


def is_test_path(rel_path: PurePosixPath) -> bool:
    """True for modules inside a test directory and for test or conftest modules."""
    if TEST_DIRS.intersection(part.lower() for part in rel_path.parts[:-1]):
        return True
    name = rel_path.name.lower()
    return name.startswith('test_') or name.endswith('_test.py') or name == 'conftest.py'


def pattern_matches(pattern: str, rel_path: PurePosixPath) -> bool:
    """
    Match one gitignore-style pattern against a path relative to the scan root.

    A trailing slash restricts the pattern to directories. Patterns without
    a slash match any single path component; the others are anchored at
    the scan root.
    """
    dir_only = pattern.endswith('/')
    body = pattern.rstrip('/')
    candidates = rel_path.parts[:-1] if dir_only else rel_path.parts

    if '/' not in body:
        return any(fnmatch.fnmatch(part, body) for part in candidates)

    text = rel_path.as_posix()
    if dir_only:
        return text.startswith(body + '/') or fnmatch.fnmatch(text, body + '/*')
    return fnmatch.fnmatch(text, body)


class IgnorePatterns:
    """Decides which discovered files are skipped during a directory scan."""

    def __init__(self, project_root: Optional[str] = None, ignore_file: Optional[str] = None,
                 use_gitignore: bool = True, include_tests: bool = False):
        """
        Initialize ignore patterns.

        Args:
            project_root: Scan root directory (default: current directory)
            ignore_file: Name of the custom ignore file (default: .complexityignore)
            use_gitignore: Whether to respect .gitignore files
            include_tests: Whether to scan test directories and test modules
        """
        self.project_root = Path(project_root or os.getcwd()).resolve()
        self.ignore_file = ignore_file or IGNORE_FILE
        self.use_gitignore = use_gitignore
        self.include_tests = include_tests
        self.patterns: Set[str] = set(DEFAULT_PATTERNS)
        self.gitignore_patterns: Set[str] = set()

        if self.use_gitignore:
            self.load_gitignore_files()
        self.load_ignore_file()

    def load_ignore_file(self) -> None:
        """Load patterns from the custom ignore file in the scan root."""
        ignore_path = self.project_root / self.ignore_file
        if ignore_path.is_file():
            self.patterns.update(self._read_patterns(ignore_path))

    def load_gitignore_files(self) -> None:
        """
        Load .gitignore files from the scan root and every parent directory.

        The scan root's own file applies as written. A parent's file only
        contributes its bare-name patterns, since its anchored ones refer
        to paths outside the scan root's layout.
        """
        own = self.project_root / ".gitignore"
        if own.is_file():
            self.gitignore_patterns.update(self._gitignore_entries(own))

        for parent in self.project_root.parents:
            gitignore_path = parent / ".gitignore"
            if gitignore_path.is_file():
                self.gitignore_patterns.update(
                    entry for entry in self._gitignore_entries(gitignore_path)
                    if '/' not in entry.rstrip('/')
                )

        if self.gitignore_patterns:
            logger.info(f"Loaded {len(self.gitignore_patterns)} .gitignore patterns")

    def _gitignore_entries(self, path: Path) -> Iterable[str]:
        logger.debug(f"Loading .gitignore from {path}")
        for line in self._read_patterns(path):
            # Negations are not supported
            if line.startswith('!'):
                continue
            line = line.lstrip('/')
            if line:
                yield line

    @staticmethod
    def _read_patterns(path: Path) -> List[str]:
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return []
        stripped = (line.strip() for line in text.splitlines())
        return [line for line in stripped if line and not line.startswith('#')]

    def relative_path(self, file_path: Path) -> PurePosixPath:
        """Path of ``file_path`` relative to the scan root (absolute when outside it)."""
        resolved = Path(file_path).resolve()
        try:
            return PurePosixPath(resolved.relative_to(self.project_root).as_posix())
        except ValueError:
            return PurePosixPath(resolved.as_posix())

    def should_ignore(self, file_path: Path) -> bool:
        """
        Check if a file should be ignored.

        Args:
            file_path: Path to check

        Returns:
            True if file should be ignored, False otherwise
        """
        rel_path = self.relative_path(file_path)
        if not self.include_tests and is_test_path(rel_path):
            return True
        return any(pattern_matches(pattern, rel_path) for pattern in self.get_patterns())

    def add_pattern(self, pattern: str) -> None:
        """Add a new ignore pattern."""
        self.patterns.add(pattern)

    def get_patterns(self) -> List[str]:
        """
        Get all current patterns.

        Returns:
            Sorted list of default, custom and .gitignore patterns
        """
        return sorted(self.patterns | self.gitignore_patterns)
