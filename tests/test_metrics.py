"""
Tests for structural metrics and the combined metric record.
"""

from complexitytracker.core.metrics import MetricsCalculator, StructuralMetrics
from complexitytracker.models import ComplexityEstimate


class TestStructuralMetrics:
    """Test nesting depth and line count."""

    def test_flat_function(self, unit_from):
        unit = unit_from("def f(a):\n    return a\n")
        result = StructuralMetrics().measure(unit)
        assert result.max_nesting_depth == 0
        assert result.line_count == 2

    def test_single_if_has_depth_one(self, unit_from):
        unit = unit_from("def f(a):\n    if a:\n        return 1\n    return 0\n")
        assert StructuralMetrics().measure(unit).max_nesting_depth == 1

    def test_loop_with_if_has_depth_two(self, unit_from):
        code = '''
def f(items):
    for item in items:
        if item:
            print(item)
'''
        assert StructuralMetrics().measure(unit_from(code)).max_nesting_depth == 2

    def test_line_count_includes_blank_lines_and_comments(self, unit_from):
        code = '''def f(a):
    # comment

    b = a

    return b
'''
        assert StructuralMetrics().measure(unit_from(code)).line_count == 6

    def test_decorators_are_not_counted(self, unit_from):
        code = '''
@property
def f(self):
    return 1
'''
        assert StructuralMetrics().measure(unit_from(code)).line_count == 2


class TestMetricsCalculator:
    """Test the combined MetricRecord."""

    def test_measure(self, measure):
        code = '''
def process(items, limit):
    total = 0
    for item in items:
        if item > limit and item % 2:
            total += item
    return total
'''
        record = measure(code)
        assert record.cyclomatic_complexity == 4
        assert record.cognitive_complexity == 4
        assert record.max_nesting_depth == 2
        assert record.line_count == 6
        assert record.function.name == "process"

    def test_measuring_twice_gives_equal_records(self, unit_from, calculator):
        code = '''
def f(a, b):
    while a > b:
        a -= 1
        if a == 3 or b == 3:
            break
    return a
'''
        unit = unit_from(code)
        assert calculator.measure(unit) == calculator.measure(unit)

    def test_estimate_matches_record(self, unit_from, calculator):
        unit = unit_from("def f(a):\n    if a:\n        return 1\n    return 0\n")
        record = calculator.measure(unit)
        assert calculator.estimate(unit) == MetricsCalculator.summarize(record)
        assert calculator.estimate(unit) == ComplexityEstimate(cyclomatic=2, cognitive=1, max_nesting=1)

    def test_to_dict(self, measure):
        record = measure("def f(a):\n    return a\n")
        data = record.to_dict()
        assert data == {
            "function": "f",
            "file_path": None,
            "line": 1,
            "cyclomatic": 1,
            "cognitive": 0,
            "max_nesting": 0,
            "lines": 2,
        }
