"""
Services package for ComplexityTracker.
Configuration and file discovery used by the CLI, the API and the engine.
"""

from .configuration_service import (
    ConfigurationService,
    UnifiedConfig,
    ThresholdConfig,
    AnalysisConfig,
    get_config_service,
    reset_config_service
)
from .file_scan_service import FileScanService

__all__ = [
    "ConfigurationService",
    "UnifiedConfig",
    "ThresholdConfig",
    "AnalysisConfig",
    "get_config_service",
    "reset_config_service",
    "FileScanService",
]
