"""
Tests for the ComplexityTracker CLI.
"""

import asyncio
import json
import os
import shutil
import tempfile

import pytest

from complexitytracker.cli import create_parser, main

COMPLEX = '''
def tangled(a, b, c, d):
    if a:
        for x in b:
            if x and c:
                while d:
                    d -= 1
                    if d == 3:
                        break
    return a
'''

SIMPLE = '''
def plain(a):
    return a + 1
'''


def run(argv):
    return asyncio.run(main(argv))


class TestCLI:
    """Test CLI functionality."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.old_cwd = os.getcwd()
        os.chdir(self.temp_dir)
        self.simple_file = self.write("simple.py", SIMPLE)
        self.complex_file = self.write("complex.py", COMPLEX)

    def teardown_method(self):
        """Clean up test environment."""
        os.chdir(self.old_cwd)
        shutil.rmtree(self.temp_dir)

    def write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_parser_has_commands(self):
        parser, commands = create_parser()
        assert set(commands) == {"check", "analyze", "serve"}
        args = parser.parse_args(["check", "--cyclomatic-limit", "5", "src"])
        assert args.cyclomatic_limit == 5
        assert args.paths == ["src"]

    def test_check_clean_file(self, capsys):
        assert run(["check", self.simple_file]) == 0
        output = capsys.readouterr().out
        assert "All functions are within the limits" in output

    def test_check_reports_violations(self, capsys):
        assert run(["check", self.complex_file]) == 1

        output = capsys.readouterr().out
        lines = output.splitlines()
        assert f"{self.complex_file}:2: tangled cyclomatic=7 cognitive=16" in lines
        assert any(line.startswith("    -> ") for line in lines)
        assert "1 functions exceed the limits" in output

    def test_check_limits_from_flags(self, capsys):
        assert run(["check", self.complex_file, "--cognitive-limit", "20", "--nesting-limit", "5"]) == 0
        assert run(["check", self.simple_file, "--line-limit", "1"]) == 1

    def test_check_without_suggestions(self, capsys):
        assert run(["check", self.complex_file, "--no-suggestions"]) == 1
        assert "    -> " not in capsys.readouterr().out

    def test_check_average(self, capsys):
        assert run(["check", self.simple_file, self.complex_file, "--average", "--all"]) == 1
        output = capsys.readouterr().out
        assert "average cyclomatic=4.00" in output
        assert f"{self.simple_file}:2: plain cyclomatic=1 cognitive=0" in output

    def test_check_json(self, capsys):
        assert run(["check", self.complex_file, "--json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["violations"] == 1
        assert data["violations"][0]["function"] == "tangled"
        assert data["violations"][0]["suggestions"]

    def test_check_directory(self, capsys):
        os.makedirs(os.path.join(self.temp_dir, "tests"))
        self.write(os.path.join("tests", "test_complex.py"), COMPLEX)

        assert run(["check", self.temp_dir, "--no-gitignore", "--json", "--all"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["files_analyzed"] == 2

    def test_invalid_limit(self, capsys):
        assert run(["check", self.simple_file, "--cyclomatic-limit", "0"]) == 2
        assert "cyclomatic_limit" in capsys.readouterr().err

    def test_invalid_workers(self):
        assert run(["check", self.simple_file, "--workers", "0"]) == 2

    def test_missing_path(self, capsys):
        assert run(["check", os.path.join(self.temp_dir, "missing.py")]) == 2
        assert "Path not found" in capsys.readouterr().err

    def test_nothing_to_check(self, capsys):
        empty = self.write("constants.py", "VALUE = 1\n")
        assert run(["check", empty]) == 3
        assert "Nothing to check" in capsys.readouterr().out

    def test_only_parse_errors(self, capsys):
        broken = self.write("broken.py", "def broken(:\n    pass\n")
        assert run(["check", broken]) == 3
        assert f"{broken}:1: parse error:" in capsys.readouterr().out

    def test_parse_error_alongside_results(self, capsys):
        broken = self.write("broken.py", "def broken(:\n    pass\n")
        assert run(["check", broken, self.simple_file]) == 0
        assert f"{broken}:1: parse error:" in capsys.readouterr().out

    def test_config_file(self, capsys):
        config = self.write("limits.json", json.dumps({"thresholds": {"cognitive_limit": 30, "nesting_limit": 6}}))
        assert run(["--config", config, "check", self.complex_file]) == 0

    def test_default_config_file(self):
        self.write(".complexitytracker.json", json.dumps({"thresholds": {"line_limit": 1}}))
        assert run(["check", self.simple_file]) == 1

    def test_broken_config_file(self, capsys):
        config = self.write("broken.json", "{")
        assert run(["--config", config, "check", self.simple_file]) == 2

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit) as exc_info:
            run(["--log-level", "chatty", "check", self.simple_file])
        assert exc_info.value.code == 2

    def test_analyze_code(self, capsys):
        code = "def pick(a):\n    return 1 if a else 2\n"
        assert run(["analyze", "--code", code]) == 0

        output = capsys.readouterr().out
        assert "pick (<string>:1)" in output
        assert "cyclomatic=2 cognitive=1 nesting=1 lines=2" in output
        assert "line 2: +1 ternary (nesting=0)" in output
        assert "average cyclomatic=2.00" in output

    def test_analyze_file_json(self, capsys):
        assert run(["analyze", self.complex_file, "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [function["function"] for function in data["functions"]] == ["tangled"]

    def test_analyze_requires_a_source(self):
        with pytest.raises(SystemExit):
            run(["analyze"])
