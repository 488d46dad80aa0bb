"""
Custom exceptions for Schema Sentinel.

These exceptions provide clear error semantics across the system.
Anomalies found in the data are never raised; they are the normal output of
validation. Exceptions are reserved for inputs that cannot be processed.
"""


class SchemaSentinelError(Exception):
    """Base exception for all Schema Sentinel failures."""
    pass


class InvalidInputError(SchemaSentinelError):
    """Raised when statistics or observed values cannot be reconciled."""
    pass


class InputParseError(InvalidInputError):
    """Raised when a serialized statistics or schema payload is malformed."""
    pass


class StatisticsInconsistencyError(InvalidInputError):
    """Raised when a statistics snapshot lists the same feature path twice."""
    pass


class SchemaConsistencyError(SchemaSentinelError):
    """Raised when a schema contradicts itself (duplicate path, bad domain)."""
    pass


class AnomalyDetectionError(SchemaSentinelError):
    """Raised when an anomaly detector is used out of order."""
    pass


class ConfigurationError(SchemaSentinelError):
    """Raised when configuration is invalid or missing."""
    pass
