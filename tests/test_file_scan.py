"""
Tests for file discovery and ignore patterns.
"""

import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath

import pytest

from complexitytracker.exceptions import ComplexityTrackerError
from complexitytracker.ignore_patterns import IgnorePatterns, is_test_path, pattern_matches
from complexitytracker.services import FileScanService


class ScanTestBase:
    """Temporary project tree helpers."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def touch(self, relative, content="def f():\n    pass\n"):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def relative(self, paths):
        return [path.relative_to(self.root).as_posix() for path in paths]


class TestIgnorePatterns(ScanTestBase):
    """Test IgnorePatterns functionality."""

    def test_default_directories_are_ignored(self):
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)
        assert patterns.should_ignore(self.root / ".venv" / "lib" / "module.py")
        assert patterns.should_ignore(self.root / "pkg" / "__pycache__" / "module.py")
        assert patterns.should_ignore(self.root / "build" / "lib" / "module.py")
        assert not patterns.should_ignore(self.root / "pkg" / "module.py")
        assert not patterns.should_ignore(self.root / "pkg" / "__init__.py")

    @pytest.mark.parametrize("relative", [
        "tests/module.py",
        "pkg/test/helpers.py",
        "test_module.py",
        "pkg/module_test.py",
        "conftest.py",
    ])
    def test_test_files_are_ignored(self, relative):
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)
        assert patterns.should_ignore(self.root / relative)

    def test_include_tests(self):
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False, include_tests=True)
        assert not patterns.should_ignore(self.root / "tests" / "test_module.py")

    def test_gitignore_in_scan_root(self):
        (self.root / ".gitignore").write_text("# generated\ngenerated/\n*_pb2.py\n!keep.py\n")
        patterns = IgnorePatterns(self.temp_dir)

        assert patterns.should_ignore(self.root / "generated" / "module.py")
        assert patterns.should_ignore(self.root / "pkg" / "service_pb2.py")
        assert not patterns.should_ignore(self.root / "pkg" / "service.py")

    def test_gitignore_can_be_disabled(self):
        (self.root / ".gitignore").write_text("*.py\n")
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)
        assert not patterns.should_ignore(self.root / "module.py")

    def test_custom_ignore_file(self):
        (self.root / ".complexityignore").write_text("legacy/\nvendored_*.py\n")
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)

        assert patterns.should_ignore(self.root / "legacy" / "old.py")
        assert patterns.should_ignore(self.root / "vendored_yaml.py")
        assert "legacy/" in patterns.get_patterns()

    def test_add_pattern(self):
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)
        patterns.add_pattern("scratch_*.py")
        assert patterns.should_ignore(self.root / "scratch_1.py")

    def test_parent_gitignore_contributes_bare_names_only(self):
        project = self.root / "project"
        project.mkdir()
        (self.root / ".gitignore").write_text("*.generated.py\nproject/src/\n")
        patterns = IgnorePatterns(str(project))

        assert patterns.should_ignore(project / "models.generated.py")
        assert not patterns.should_ignore(project / "src" / "module.py")

    def test_relative_path(self):
        patterns = IgnorePatterns(self.temp_dir, use_gitignore=False)
        assert patterns.relative_path(self.root / "pkg" / "module.py") == PurePosixPath("pkg/module.py")
        assert patterns.relative_path(self.root / "pkg" / ".." / "module.py") == PurePosixPath("module.py")


class TestFileScanService(ScanTestBase):
    """Test FileScanService functionality."""

    def test_find_files_sorted(self):
        self.touch("b.py")
        self.touch("a.py")
        self.touch("pkg/c.py")
        self.touch("README.md", "# readme")

        files = FileScanService(use_gitignore=False).find_files(self.temp_dir)
        assert self.relative(files) == ["a.py", "b.py", "pkg/c.py"]

    def test_find_files_skips_tests_unless_asked(self):
        self.touch("module.py")
        self.touch("tests/test_module.py")

        assert self.relative(FileScanService(use_gitignore=False).find_files(self.temp_dir)) == ["module.py"]
        assert self.relative(
            FileScanService(include_tests=True, use_gitignore=False).find_files(self.temp_dir)
        ) == ["module.py", "tests/test_module.py"]

    def test_explicit_file_is_always_returned(self):
        path = self.touch("tests/test_module.py")
        assert FileScanService().find_files(str(path)) == [path]

    def test_missing_path(self):
        with pytest.raises(ComplexityTrackerError) as exc_info:
            FileScanService().find_files(os.path.join(self.temp_dir, "missing"))
        assert "Path not found" in str(exc_info.value)

    def test_find_all_drops_repeats(self):
        path = self.touch("module.py")
        files = FileScanService(use_gitignore=False).find_all([self.temp_dir, str(path)])
        assert self.relative(files) == ["module.py"]


class TestPatternMatching:
    """Test the gitignore-style matcher."""

    @pytest.mark.parametrize("pattern, path, expected", [
        ("build/", "build/lib/module.py", True),
        ("build/", "pkg/build/module.py", True),
        ("build/", "build.py", False),
        ("*.egg-info/", "pkg.egg-info/module.py", True),
        ("docs/_build/", "docs/_build/conf.py", True),
        ("docs/_build/", "pkg/docs/_build/conf.py", False),
        ("*_pb2.py", "pkg/service_pb2.py", True),
        ("pkg/*.py", "pkg/module.py", True),
        ("pkg/*.py", "other/pkg/module.py", False),
    ])
    def test_pattern_matches(self, pattern, path, expected):
        assert pattern_matches(pattern, PurePosixPath(path)) is expected

    @pytest.mark.parametrize("path, expected", [
        ("tests/module.py", True),
        ("pkg/Tests/helpers.py", True),
        ("test_module.py", True),
        ("module_test.py", True),
        ("conftest.py", True),
        ("pkg/testing_utils.py", False),
        ("pkg/contest.py", False),
    ])
    def test_is_test_path(self, path, expected):
        assert is_test_path(PurePosixPath(path)) is expected
