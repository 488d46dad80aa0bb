"""
JSON payload codec for statistics, schemas, and anomaly reports.

Decoding goes through the pydantic models, so a payload that parses is also
structurally valid. Malformed payloads raise InputParseError. Schema
consistency problems (duplicate paths, inverted ranges) surface as
SchemaConsistencyError, and are not parse errors.
"""

import logging
from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from src.anomaly.schema import AnomaliesReport
from src.core.exceptions import InputParseError
from src.schema.definition import SchemaDefinition
from src.stats.schema import DatasetStatistics

logger = logging.getLogger(__name__)

Payload = Union[str, bytes]
ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode(model: Type[ModelT], payload: Payload, label: str) -> ModelT:
    try:
        return model.model_validate_json(payload)
    except ValidationError as exc:
        logger.error("Failed to parse %s payload: %d error(s)", label, exc.error_count())
        raise InputParseError(f"Failed to parse {label}: {exc}") from exc


def parse_statistics(payload: Payload) -> DatasetStatistics:
    return _decode(DatasetStatistics, payload, "DatasetStatistics")


def parse_optional_statistics(payload: Optional[Payload]) -> Optional[DatasetStatistics]:
    """Empty or missing payloads mean "no snapshot"."""
    if not payload:
        return None
    return parse_statistics(payload)


def parse_schema(payload: Payload) -> SchemaDefinition:
    return _decode(SchemaDefinition, payload, "SchemaDefinition")


def parse_anomalies(payload: Payload) -> AnomaliesReport:
    return _decode(AnomaliesReport, payload, "AnomaliesReport")


def dump_schema(schema: SchemaDefinition) -> str:
    return schema.model_dump_json()


def dump_anomalies(report: AnomaliesReport) -> str:
    return report.model_dump_json()
