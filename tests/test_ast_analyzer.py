"""
Tests for function unit extraction and lowering.
"""

import os
import shutil
import tempfile

import pytest

from complexitytracker.ast_analysis import ASTAnalyzer
from complexitytracker.exceptions import ParseError
from complexitytracker.models import NodeKind


class TestASTAnalyzer:
    """Test ASTAnalyzer functionality."""

    def setup_method(self):
        """Set up test environment."""
        self.analyzer = ASTAnalyzer()

    def test_extracts_functions_in_source_order(self):
        """Top-level functions, methods and nested functions are all units."""
        code = '''
def first():
    pass

class Greeter:
    def greet(self, name):
        return f"Hello {name}"

    async def fetch(self):
        def inner(value):
            return value
        return inner(1)

def last(*args, key=None, **kwargs):
    return args
'''
        parsed = self.analyzer.parse_code(code, "sample.py")

        names = [unit.qualified_name for unit in parsed.units]
        assert names == ["first", "Greeter.greet", "Greeter.fetch", "Greeter.fetch.inner", "last"]
        assert parsed.failures == []

        greet = parsed.units[1]
        assert greet.is_method
        assert greet.parameters == ("self", "name")
        assert greet.file_path == "sample.py"
        assert greet.location == "sample.py:6"

        assert not parsed.units[3].is_method
        assert parsed.units[4].parameters == ("args", "key", "kwargs")

    def test_line_span(self):
        """Units span from the def line to the last line of the body."""
        code = '''def span(x):
    y = x + 1

    return y
'''
        unit = self.analyzer.parse_code(code).units[0]
        assert unit.start_line == 1
        assert unit.end_line == 4
        assert unit.line_count == 4

    def test_module_without_functions(self):
        parsed = self.analyzer.parse_code("x = 1\nprint(x)\n")
        assert parsed.units == []

    def test_syntax_error_raises_parse_error(self):
        """A module that is not valid Python cannot be analyzed."""
        with pytest.raises(ParseError) as exc_info:
            self.analyzer.parse_code("def broken(:\n    pass\n", "broken.py")

        error = exc_info.value
        assert error.file_path == "broken.py"
        assert error.line == 1
        assert error.location() == "broken.py:1"

    def test_lowering_marks_constructs(self):
        """Decision constructs are lowered to their node kinds."""
        code = '''
def kinds(items, flag):
    for item in items:
        if item and not flag:
            continue
    try:
        kinds(items[1:], flag)
    except ValueError:
        pass
    match flag:
        case 1:
            pass
        case _:
            pass
'''
        unit = self.analyzer.parse_code(code).units[0]
        kinds = {node.kind for node in unit.body.walk()}

        assert {NodeKind.LOOP, NodeKind.CONDITIONAL, NodeKind.LOGICAL_AND, NodeKind.NEGATION,
                NodeKind.JUMP, NodeKind.CATCH, NodeKind.RECURSION, NodeKind.SWITCH,
                NodeKind.CASE}.issubset(kinds)

        cases = [node for node in unit.body.walk() if node.kind is NodeKind.CASE]
        assert [case.label for case in cases] == ["case", "default"]

    def test_method_recursion_requires_self(self):
        """Only ``self.name()`` is a recursive call inside a method."""
        code = '''
class Tree:
    def size(self, node):
        other.size(node)
        return self.size(node.left)
'''
        unit = self.analyzer.parse_code(code).units[0]
        recursive = [node for node in unit.body.walk() if node.kind is NodeKind.RECURSION]
        assert len(recursive) == 1

    def test_definitions_inside_blocks_keep_their_prefix(self):
        """Functions under if/try blocks are found in source order with the enclosing prefix."""
        code = '''
import sys

if sys.version_info >= (3, 8):
    def compat():
        pass
else:
    def compat():
        pass

try:
    def loader():
        pass
except ImportError:
    loader = None

class Store:
    if True:
        def get(self):
            def fetch():
                return 1
            return fetch()
'''
        parsed = self.analyzer.parse_code(code)

        names = [unit.qualified_name for unit in parsed.units]
        assert names == ["compat", "compat", "loader", "Store.get", "Store.get.fetch"]
        assert [unit.is_method for unit in parsed.units] == [False, False, False, True, False]

    def test_long_arithmetic_expression(self):
        """Hundreds of chained operands lower to one leaf instead of failing the unit."""
        code = "def concat(a):\n    return " + " + ".join(["a"] * 300) + "\n"
        parsed = self.analyzer.parse_code(code)

        assert [unit.qualified_name for unit in parsed.units] == ["concat"]
        assert parsed.failures == []

    def test_long_expression_keeps_its_boolean_operator(self):
        code = "def mixed(a, b, c):\n    return " + " + ".join(["a"] * 300) + " + (b and c)\n"
        unit = self.analyzer.parse_code(code).units[0]

        kinds = [node.kind for node in unit.body.walk()]
        assert kinds.count(NodeKind.LOGICAL_AND) == 1

    def test_very_long_expression_does_not_hide_other_functions(self):
        code = ("def deep(a):\n    return " + " + ".join(["a"] * 1200) + "\n\n"
                "def after(b):\n    return b\n")
        parsed = self.analyzer.parse_code(code, "deep.py")

        assert [unit.qualified_name for unit in parsed.units] == ["deep", "after"]


class TestParseFile:
    """Test reading units from disk."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.analyzer = ASTAnalyzer()

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_parse_file(self):
        path = os.path.join(self.temp_dir, "module.py")
        with open(path, "w") as f:
            f.write("def hello():\n    print('Hello')\n")

        parsed = self.analyzer.parse_file(path)

        assert parsed.file_path == path
        assert [unit.name for unit in parsed.units] == ["hello"]
        assert parsed.units[0].file_path == path

    def test_missing_file(self):
        path = os.path.join(self.temp_dir, "missing.py")
        with pytest.raises(ParseError) as exc_info:
            self.analyzer.parse_file(path)
        assert "cannot read file" in exc_info.value.message

    def test_undecodable_file(self):
        path = os.path.join(self.temp_dir, "binary.py")
        with open(path, "wb") as f:
            f.write(b"\xff\xfe\x00def x(): pass")
        with pytest.raises(ParseError):
            self.analyzer.parse_file(path)
