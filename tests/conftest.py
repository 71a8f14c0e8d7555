"""Fixtures for complexitytracker tests."""

import os

import pytest

from complexitytracker.ast_analysis import ASTAnalyzer
from complexitytracker.core.metrics import MetricsCalculator
from complexitytracker.refactoring_advisor import PatternAdvisor
from complexitytracker.services.configuration_service import reset_config_service


@pytest.fixture
def ast_analyzer():
    """Create an ASTAnalyzer instance."""
    return ASTAnalyzer()


@pytest.fixture
def calculator():
    """Create a MetricsCalculator instance."""
    return MetricsCalculator()


@pytest.fixture
def advisor():
    """Create a PatternAdvisor with default thresholds."""
    return PatternAdvisor()


@pytest.fixture
def unit_from(ast_analyzer):
    """Parse source and return one of its function units (the first by default)."""
    def _unit_from(source, name=None):
        units = ast_analyzer.parse_code(source).units
        if name is None:
            return units[0]
        return next(unit for unit in units if unit.qualified_name == name)
    return _unit_from


@pytest.fixture
def measure(unit_from, calculator):
    """Parse source and return the metric record of its first function."""
    def _measure(source, name=None):
        return calculator.measure(unit_from(source, name))
    return _measure


@pytest.fixture(autouse=True)
def clean_config_service(monkeypatch):
    """Keep the global configuration service and environment isolated per test."""
    for key in list(os.environ):
        if key.startswith("COMPLEXITYTRACKER_"):
            monkeypatch.delenv(key, raising=False)
    reset_config_service()
    yield
    reset_config_service()
