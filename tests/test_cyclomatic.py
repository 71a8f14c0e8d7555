"""
Tests for control-flow graph construction and cyclomatic scoring.
"""

import pytest

from complexitytracker.ast_analysis import ASTAnalyzer
from complexitytracker.core.graph import CFGBuilder
from complexitytracker.core.graph.cfg_builder import ENTRY, EXIT
from complexitytracker.core.metrics import CyclomaticScorer


class TestCyclomaticScorer:
    """Test V(G) = decisions + 1."""

    def setup_method(self):
        """Set up test environment."""
        self.analyzer = ASTAnalyzer()
        self.scorer = CyclomaticScorer()

    def score(self, code, name=None):
        units = self.analyzer.parse_code(code).units
        unit = units[0] if name is None else next(u for u in units if u.qualified_name == name)
        return self.scorer.score(unit)

    def test_straight_line_function(self):
        code = '''
def add(a, b):
    total = a + b
    print(total)
    return total
'''
        assert self.score(code) == 1

    def test_empty_body(self):
        assert self.score("def noop():\n    pass\n") == 1

    def test_if_else(self):
        code = '''
def sign(x):
    if x > 0:
        return 1
    else:
        return -1
'''
        assert self.score(code) == 2

    def test_elif_chain(self):
        code = '''
def grade(score):
    if score > 90:
        return "A"
    elif score > 80:
        return "B"
    elif score > 70:
        return "C"
    return "F"
'''
        assert self.score(code) == 4

    def test_for_loop(self):
        code = '''
def total(items):
    result = 0
    for item in items:
        result += item
    return result
'''
        assert self.score(code) == 2

    def test_while_loop(self):
        code = '''
def countdown(n):
    while n > 0:
        n -= 1
    return n
'''
        assert self.score(code) == 2

    def test_infinite_loop_without_exit(self):
        """``while True`` without a way out never decides anything."""
        code = '''
def serve(queue):
    while True:
        queue.process()
'''
        assert self.score(code) == 1

    def test_infinite_loop_with_break(self):
        code = '''
def serve(queue):
    while True:
        item = queue.get()
        if item is None:
            break
        queue.process(item)
'''
        # the if and the loop exit
        assert self.score(code) == 3

    def test_break_in_inner_loop_does_not_exit_outer(self):
        code = '''
def serve(queues):
    while True:
        for queue in queues:
            break
'''
        # only the for loop decides
        assert self.score(code) == 2

    def test_match_with_default(self):
        code = '''
def describe(command):
    match command:
        case "start":
            return 1
        case "stop":
            return 2
        case "pause":
            return 3
        case "resume":
            return 4
        case "reset":
            return 5
        case _:
            return 0
'''
        assert self.score(code) == 6

    def test_match_without_default(self):
        code = '''
def describe(command):
    match command:
        case "start":
            return 1
        case "stop":
            return 2
'''
        assert self.score(code) == 3

    def test_try_with_two_handlers(self):
        code = '''
def load(path):
    try:
        return open(path).read()
    except FileNotFoundError:
        return None
    except PermissionError:
        return ""
'''
        assert self.score(code) == 3

    def test_boolean_chain(self):
        code = '''
def all_set(a, b, c):
    return a and b and c
'''
        assert self.score(code) == 3

    def test_condition_with_mixed_operators(self):
        code = '''
def check(a, b):
    if (a and b) or not a:
        return 1
    return 0
'''
        assert self.score(code) == 4

    def test_ternary(self):
        code = '''
def pick(flag):
    return "yes" if flag else "no"
'''
        assert self.score(code) == 2

    def test_comprehension_with_filter(self):
        code = '''
def evens(items):
    return [item for item in items if item % 2 == 0]
'''
        # the generator loop and its filter
        assert self.score(code) == 3

    def test_nested_definitions_are_separate_units(self):
        code = '''
def outer(items):
    def inner(item):
        if item:
            return item
        return None
    return [inner(item) for item in items]
'''
        assert self.score(code, "outer") == 2
        assert self.score(code, "outer.inner") == 2

    @pytest.mark.parametrize("base, extended", [
        # one more condition around the body
        ("    if x:\n        y += 1\n",
         "    if x:\n        if y:\n            y += 1\n"),
        # one more loop
        ("    y += 1\n",
         "    for item in x:\n        y += item\n"),
        # one more non-default case
        ("    match x:\n        case 1:\n            y = 1\n        case _:\n            y = 0\n",
         "    match x:\n        case 1:\n            y = 1\n        case 2:\n            y = 2\n        case _:\n            y = 0\n"),
        # one more logical operator
        ("    if x:\n        y += 1\n",
         "    if x and y:\n        y += 1\n"),
    ])
    def test_adding_a_decision_never_lowers_the_score(self, base, extended):
        """Each added if, loop, case or boolean operator raises the score by one."""
        def wrap(body):
            return f"def f(x, y):\n{body}    return y\n"

        assert self.score(wrap(extended)) == self.score(wrap(base)) + 1


class TestControlFlowGraph:
    """Test graph structure."""

    def setup_method(self):
        """Set up test environment."""
        self.analyzer = ASTAnalyzer()

    def build(self, code):
        unit = self.analyzer.parse_code(code).units[0]
        return CFGBuilder().build(unit.body)

    @pytest.mark.parametrize("code", [
        "def f():\n    pass\n",
        "def f(x):\n    if x:\n        return 1\n    return 2\n",
        "def f(xs):\n    for x in xs:\n        if x:\n            break\n    else:\n        return 0\n",
        "def f(q):\n    while True:\n        if q.empty():\n            return None\n",
        "def f(p):\n    try:\n        g(p)\n    except OSError:\n        raise\n    finally:\n        h()\n",
    ])
    def test_exit_reachable_from_entry(self, code):
        graph = self.build(code)
        assert EXIT in graph.reachable(ENTRY)

    def test_endless_loop_has_no_path_to_exit(self):
        graph = self.build("def serve(q):\n    while True:\n        q.poll()\n")
        assert EXIT not in graph.reachable(ENTRY)
        assert graph.decision_points == 0

    def test_decision_points_count_extra_out_edges(self):
        graph = self.build("def f(x):\n    if x:\n        x += 1\n    return x\n")
        assert graph.decision_points == 1
        assert max(graph.out_degree(block.index) for block in graph.blocks) == 2

    def test_code_after_return_is_still_scored(self):
        code = '''
def f(x):
    return x
    if x:
        print(x)
'''
        graph = self.build(code)
        assert graph.decision_points == 1
        assert any(block.kind == "unreachable" for block in graph.blocks)
