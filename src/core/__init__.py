"""
Core module: Configuration, logging, exception handling, and feature paths.
"""

from .config import AnomalyConfig, Config, InferenceConfig, config
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    InputParseError,
    InvalidInputError,
    SchemaConsistencyError,
    SchemaSentinelError,
    StatisticsInconsistencyError,
)
from .paths import FeaturePath, format_path, to_path

__all__ = [
    "Config",
    "config",
    "InferenceConfig",
    "AnomalyConfig",
    "SchemaSentinelError",
    "InvalidInputError",
    "InputParseError",
    "StatisticsInconsistencyError",
    "SchemaConsistencyError",
    "AnomalyDetectionError",
    "ConfigurationError",
    "FeaturePath",
    "format_path",
    "to_path",
]
