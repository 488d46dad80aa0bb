"""
Application configuration for Schema Sentinel.

Provides environment-aware settings with conservative defaults. Inference and
validation thresholds are configurable to avoid hard-coded "magic numbers".
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ENUM_THRESHOLD = 400


class InferenceConfig(BaseModel):
	"""
	Knobs shared by schema inference and validation.

	Notes:
	- enum_threshold: maximum distinct values for a string feature to be
	  enumerated rather than unconstrained.
	- new_features_are_warnings: report unseen features as warnings instead of
	  errors.
	"""

	enum_threshold: int = Field(DEFAULT_ENUM_THRESHOLD, ge=0)
	new_features_are_warnings: bool = False


class AnomalyConfig(BaseModel):
	"""
	Anomaly detection configuration.

	Rationale:
	- default_drift_threshold of 1.0 never fires, so drift is opt-in per feature.
	- max_sample_values bounds the offending values attached to an anomaly.
	"""

	max_sample_values: int = Field(10, ge=1, description="Cap on sampled offending values")
	default_drift_threshold: float = Field(
		1.0, ge=0.0, le=1.0, description="Drift threshold used when a feature declares none"
	)
	drift_histogram_bins: int = Field(
		10, ge=1, description="Buckets used when re-binning numeric histograms"
	)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="SENTINEL_", env_file=".env", env_nested_delimiter="__", extra="ignore"
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	inference: InferenceConfig = InferenceConfig()
	anomaly: AnomalyConfig = AnomalyConfig()


config = Config()
