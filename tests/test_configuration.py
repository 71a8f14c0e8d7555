"""
Tests for layered configuration and threshold validation.
"""

import json
import os
import shutil
import tempfile

import pytest

from complexitytracker.exceptions import ConfigError
from complexitytracker.services.configuration_service import (
    AnalysisConfig, ConfigurationService, ThresholdConfig, get_config_service, reset_config_service,
)


class TestThresholdConfig:
    """Test limit validation."""

    def test_defaults(self):
        thresholds = ThresholdConfig()
        assert thresholds.cyclomatic_limit == 10
        assert thresholds.cognitive_limit == 15
        assert thresholds.nesting_limit == 3
        assert thresholds.line_limit == 50

    @pytest.mark.parametrize("field_name,value", [
        ("cyclomatic_limit", 0),
        ("cognitive_limit", -5),
        ("nesting_limit", "3"),
        ("line_limit", 2.5),
        ("cyclomatic_limit", True),
    ])
    def test_invalid_limits(self, field_name, value):
        with pytest.raises(ConfigError) as exc_info:
            ThresholdConfig(**{field_name: value})
        assert field_name in str(exc_info.value)

    def test_exceeded_by(self):
        thresholds = ThresholdConfig(cyclomatic_limit=5, cognitive_limit=5, nesting_limit=2, line_limit=10)
        assert thresholds.exceeded_by(5, 5, 2, 10) == []
        assert thresholds.exceeded_by(6, 5, 3, 11) == ["cyclomatic", "nesting", "lines"]


class TestConfigurationService:
    """Test ConfigurationService functionality."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.json")

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def write_config(self, data):
        with open(self.config_path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_defaults_without_file(self, monkeypatch):
        monkeypatch.chdir(self.temp_dir)
        config = ConfigurationService().get_config()
        assert config.thresholds == ThresholdConfig()
        assert config.log_level == "WARNING"
        assert config.analysis.max_workers >= 1

    def test_load_from_file(self):
        self.write_config({
            "thresholds": {"cyclomatic_limit": 7, "line_limit": 80},
            "analysis": {"include_tests": True, "max_workers": 2},
            "log_level": "INFO",
        })
        config = ConfigurationService(self.config_path).get_config()

        assert config.thresholds == ThresholdConfig(cyclomatic_limit=7, line_limit=80)
        assert config.analysis.include_tests is True
        assert config.analysis.max_workers == 2
        assert config.log_level == "INFO"

    def test_default_file_in_working_directory(self, monkeypatch):
        monkeypatch.chdir(self.temp_dir)
        with open(os.path.join(self.temp_dir, ".complexitytracker.json"), "w") as f:
            json.dump({"thresholds": {"nesting_limit": 5}}, f)

        assert ConfigurationService().get_threshold_config().nesting_limit == 5

    def test_unknown_keys_are_ignored(self):
        self.write_config({"thresholds": {"cyclomatic_limit": 8, "colour": "red"}})
        assert ConfigurationService(self.config_path).get_threshold_config().cyclomatic_limit == 8

    def test_missing_explicit_file(self):
        with pytest.raises(ConfigError):
            ConfigurationService(os.path.join(self.temp_dir, "missing.json")).get_config()

    def test_invalid_json(self):
        self.write_config("{not json")
        with pytest.raises(ConfigError):
            ConfigurationService(self.config_path).get_config()

    def test_non_object_json(self):
        self.write_config([1, 2, 3])
        with pytest.raises(ConfigError):
            ConfigurationService(self.config_path).get_config()

    def test_invalid_limit_in_file(self):
        self.write_config({"thresholds": {"cognitive_limit": 0}})
        with pytest.raises(ConfigError):
            ConfigurationService(self.config_path).get_config()

    def test_invalid_log_level(self):
        self.write_config({"log_level": "LOUD"})
        with pytest.raises(ConfigError):
            ConfigurationService(self.config_path).get_config()

    def test_environment_overrides_file(self, monkeypatch):
        self.write_config({"thresholds": {"cyclomatic_limit": 7}})
        monkeypatch.setenv("COMPLEXITYTRACKER_THRESHOLD_CYCLOMATIC_LIMIT", "12")
        monkeypatch.setenv("COMPLEXITYTRACKER_ANALYSIS_INCLUDE_TESTS", "yes")
        monkeypatch.setenv("COMPLEXITYTRACKER_DEBUG", "true")

        config = ConfigurationService(self.config_path).get_config()
        assert config.thresholds.cyclomatic_limit == 12
        assert config.analysis.include_tests is True
        assert config.debug_mode is True

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setenv("COMPLEXITYTRACKER_THRESHOLD_NESTING_LIMIT", "deep")
        with pytest.raises(ConfigError):
            ConfigurationService().get_config()

    def test_threshold_overrides(self):
        self.write_config({"thresholds": {"cyclomatic_limit": 7}})
        service = ConfigurationService(self.config_path)

        thresholds = service.with_threshold_overrides(cognitive_limit=20, nesting_limit=None)
        assert thresholds == ThresholdConfig(cyclomatic_limit=7, cognitive_limit=20)

        with pytest.raises(ConfigError):
            service.with_threshold_overrides(line_limit=0)

    def test_to_dict(self):
        self.write_config({"analysis": {"max_workers": 3}})
        data = ConfigurationService(self.config_path).to_dict()
        assert data["thresholds"]["cyclomatic_limit"] == 10
        assert data["analysis"]["max_workers"] == 3
        assert data["debug_mode"] is False

    def test_analysis_defaults(self):
        config = AnalysisConfig()
        assert config.file_pattern == "*.py"
        assert config.include_tests is False
        assert config.use_gitignore is True


class TestGlobalConfigService:
    """Test the shared service instance."""

    def test_instance_is_shared(self):
        assert get_config_service() is get_config_service()

    def test_reset(self):
        first = get_config_service()
        reset_config_service()
        assert get_config_service() is not first
