"""
Configuration Service - Centralized configuration management.
Thresholds and analysis settings come from defaults, a JSON file,
environment variables and finally command-line flags, in that order.
"""

import os
import json
import logging
from dataclasses import dataclass, asdict, field, fields, replace
from pathlib import Path
from typing import Dict, Any, Optional, Type, TypeVar

import psutil

from ..exceptions import ConfigError

T = TypeVar('T')

DEFAULT_CONFIG_FILE = ".complexitytracker.json"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_worker_count() -> int:
    """Size the worker pool from the available CPUs."""
    return max(1, min(32, psutil.cpu_count(logical=True) or 1))


@dataclass(frozen=True)
class ThresholdConfig:
    """Complexity limits for one run. Read-only once the run starts."""
    cyclomatic_limit: int = 10
    cognitive_limit: int = 15
    nesting_limit: int = 3
    line_limit: int = 50

    def __post_init__(self):
        """Validate that every limit is a positive integer."""
        for limit in fields(self):
            value = getattr(self, limit.name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{limit.name} must be a positive integer, got {value!r}")

    def exceeded_by(self, cyclomatic: int, cognitive: int, nesting: int, lines: int) -> list:
        """Names of the limits the given scores exceed."""
        exceeded = []
        if cyclomatic > self.cyclomatic_limit:
            exceeded.append("cyclomatic")
        if cognitive > self.cognitive_limit:
            exceeded.append("cognitive")
        if nesting > self.nesting_limit:
            exceeded.append("nesting")
        if lines > self.line_limit:
            exceeded.append("lines")
        return exceeded


@dataclass
class AnalysisConfig:
    """Analysis run configuration."""
    # Discovery settings
    file_pattern: str = "*.py"
    include_tests: bool = False
    use_gitignore: bool = True

    # Advisor settings
    suggestions: bool = True

    # Performance settings
    parallel_processing: bool = True
    max_workers: int = field(default_factory=default_worker_count)


@dataclass
class UnifiedConfig:
    """Master configuration combining all settings."""
    thresholds: ThresholdConfig
    analysis: AnalysisConfig

    # Global settings
    log_level: str = "WARNING"
    debug_mode: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.analysis.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")


class ConfigurationService:
    """
    Centralized configuration management service.

    Sources are layered: dataclass defaults, then the JSON config file
    (``.complexitytracker.json`` unless another path is given), then
    ``COMPLEXITYTRACKER_*`` environment variables. Command-line flags are
    applied on top with :meth:`with_threshold_overrides`.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[UnifiedConfig] = None

    def get_config(self) -> UnifiedConfig:
        """Get the current configuration, loading from file if needed."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self, config_path: Optional[str] = None) -> UnifiedConfig:
        """
        Load configuration from file or environment variables.

        Args:
            config_path: Optional path to configuration file

        Returns:
            UnifiedConfig instance

        Raises:
            ConfigError: If an explicitly given file is missing, the file is
                not valid JSON, or any value is invalid
        """
        explicit = config_path or self.config_path
        config_file = Path(explicit) if explicit else Path(DEFAULT_CONFIG_FILE)

        data: Dict[str, Any] = {}
        if config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to load config from {config_file}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {config_file} must contain a JSON object")
            self.logger.info(f"Loaded configuration from {config_file}")
        elif explicit:
            raise ConfigError(f"Config file not found: {config_file}")

        thresholds = self._dict_to_dataclass(data.get('thresholds', {}), ThresholdConfig)
        analysis = self._dict_to_dataclass(data.get('analysis', {}), AnalysisConfig)

        # Override with environment variables
        thresholds = self._apply_env_overrides(thresholds, 'COMPLEXITYTRACKER_THRESHOLD_')
        analysis = self._apply_env_overrides(analysis, 'COMPLEXITYTRACKER_ANALYSIS_')

        global_settings = {
            'log_level': os.getenv('COMPLEXITYTRACKER_LOG_LEVEL', data.get('log_level', 'WARNING')),
            'debug_mode': os.getenv('COMPLEXITYTRACKER_DEBUG', str(data.get('debug_mode', False))).lower() == 'true',
        }

        return UnifiedConfig(
            thresholds=thresholds,
            analysis=analysis,
            **global_settings
        )

    def with_threshold_overrides(self, **overrides: Optional[int]) -> ThresholdConfig:
        """
        Return the configured thresholds with command-line values applied.

        Args:
            **overrides: Limit values by field name; None keeps the configured value

        Raises:
            ConfigError: If an override is not a positive integer
        """
        thresholds = self.get_config().thresholds
        changes = {name: value for name, value in overrides.items() if value is not None}
        return replace(thresholds, **changes) if changes else thresholds

    def to_dict(self) -> Dict[str, Any]:
        config = self.get_config()
        return {
            'thresholds': asdict(config.thresholds),
            'analysis': asdict(config.analysis),
            'log_level': config.log_level,
            'debug_mode': config.debug_mode,
        }

    def _dict_to_dataclass(self, data: Dict[str, Any], dataclass_type: Type[T]) -> T:
        """Convert dictionary to dataclass, dropping unknown keys."""
        if not isinstance(data, dict):
            raise ConfigError(f"'{dataclass_type.__name__}' section must be a JSON object")

        field_names = {f.name for f in fields(dataclass_type)}
        unknown = sorted(set(data) - field_names)
        if unknown:
            self.logger.warning(f"Ignoring unknown {dataclass_type.__name__} keys: {', '.join(unknown)}")

        filtered_data = {k: v for k, v in data.items() if k in field_names}
        return dataclass_type(**filtered_data)

    def _apply_env_overrides(self, config: T, prefix: str) -> T:
        """Apply environment variable overrides to configuration."""
        config_dict = asdict(config)

        for config_field in fields(config):
            env_key = f"{prefix}{config_field.name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                # Convert string environment variable to appropriate type
                try:
                    if config_field.type == bool:
                        config_dict[config_field.name] = env_value.lower() in ('true', '1', 'yes', 'on')
                    elif config_field.type == int:
                        config_dict[config_field.name] = int(env_value)
                    else:
                        config_dict[config_field.name] = env_value
                except ValueError as e:
                    raise ConfigError(f"Invalid value for {env_key}: {env_value!r}") from e

                self.logger.debug(f"Applied env override: {env_key}={env_value}")

        return type(config)(**config_dict)

    def get_threshold_config(self) -> ThresholdConfig:
        """Get threshold configuration."""
        return self.get_config().thresholds

    def get_analysis_config(self) -> AnalysisConfig:
        """Get analysis configuration."""
        return self.get_config().analysis


# Global configuration service instance
_config_service: Optional[ConfigurationService] = None


def get_config_service(config_path: Optional[str] = None) -> ConfigurationService:
    """Get the global configuration service instance."""
    global _config_service
    if _config_service is None or (config_path and _config_service.config_path != Path(config_path)):
        _config_service = ConfigurationService(config_path)
    return _config_service


def reset_config_service() -> None:
    """Reset the global configuration service (mainly for testing)."""
    global _config_service
    _config_service = None
