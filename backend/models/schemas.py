"""
Pydantic schemas for HVAC diagnostic readings, requests and results
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from models.enums import (
    EfficiencyRating,
    FaultSeverity,
    ResultStatus,
    SystemStatus,
    SystemType,
    UnitTag,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]
MetricValue = Union[int, float, str, None]

# Canonical parameter key -> number (canonical unit) or opaque string
StandardReadings = Dict[str, Union[int, float, str]]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Reading(BaseModel):
    """One raw form row as entered by the technician"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    parameter: str = ""
    value: str = ""
    unit: UnitTag = UnitTag.text
    is_required: bool = Field(False, alias="isRequired")
    section: Optional[str] = None


class SkippedReading(BaseModel):
    """A row the standardizer left out, and why"""
    reading_id: str
    parameter: str
    reason: str


class StandardizationResult(BaseModel):
    readings: StandardReadings = Field(default_factory=dict)
    skipped: List[SkippedReading] = Field(default_factory=list)


class DiagnosticRequest(BaseModel):
    """Everything needed for exactly one generator round trip"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    system_type: Optional[SystemType] = None
    refrigerant: Optional[str] = None
    readings: StandardReadings = Field(default_factory=dict, alias="readings_std")
    user_notes: Optional[str] = None
    model_id: str = ""
    api_key: str = Field("", repr=False)


class DiagnosticFault(BaseModel):
    severity: FaultSeverity
    component: str
    issue: str
    explanation: str
    recommended_action: str
    confidence: Optional[Number] = Field(None, ge=0, le=100)


_NUMERIC_METRICS = ("delta_t", "superheat", "subcooling")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class DiagnosticMetrics(BaseModel):
    """
    Performance metrics reported by the generator.

    The recognised metrics get typed slots; anything else (or a recognised
    key whose value does not fit its slot) is kept verbatim in ``extras``.
    Nested objects and arrays are dropped and logged at DEBUG.
    On the wire the two are flattened back into a single open map.
    """
    delta_t: Optional[Number] = None
    superheat: Optional[Number] = None
    subcooling: Optional[Number] = None
    efficiency_rating: Optional[EfficiencyRating] = None
    extras: Dict[str, MetricValue] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def split_open_map(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        typed: Dict[str, Any] = {}
        extras: Dict[str, MetricValue] = {}
        explicit_extras = data.get("extras") if isinstance(data.get("extras"), dict) else {}
        if "extras" in data and not isinstance(data["extras"], dict):
            logger.debug(f"Dropping metric 'extras': expected an object, got {type(data['extras']).__name__}")

        for key, value in list(data.items()) + list(explicit_extras.items()):
            if key == "extras":
                continue
            if isinstance(value, bool):
                value = str(value).lower()
            elif value is not None and not isinstance(value, (int, float, str)):
                # Nested objects and arrays have no place in a flat metric map
                logger.debug(f"Dropping metric {key!r}: nested {type(value).__name__} values are not kept")
                continue

            if key in _NUMERIC_METRICS and (value is None or _is_number(value)):
                typed[key] = value
            elif key == "efficiency_rating" and (
                value is None or value in EfficiencyRating._value2member_map_
            ):
                typed[key] = value
            else:
                extras[key] = value

        typed["extras"] = extras
        return typed

    @model_serializer(mode="plain")
    def flatten(self) -> Dict[str, MetricValue]:
        flat: Dict[str, MetricValue] = {}
        for name in (*_NUMERIC_METRICS, "efficiency_rating"):
            if name not in self.model_fields_set:
                continue
            value = getattr(self, name)
            flat[name] = value.value if isinstance(value, EfficiencyRating) else value
        flat.update(self.extras)
        return flat


class DiagnosticResult(BaseModel):
    """Terminal outcome of one diagnostic request"""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    status: ResultStatus
    system_status: SystemStatus
    faults: List[DiagnosticFault] = Field(default_factory=list)
    metrics: DiagnosticMetrics = Field(default_factory=DiagnosticMetrics)
    summary: str
    recommendations: List[str] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_timestamp)
    model_used: str
    error_message: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict; ``error_message`` only appears on failures"""
        payload = self.model_dump(mode="json")
        if payload.get("error_message") is None:
            payload.pop("error_message", None)
        return payload


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


# HTTP request/response bodies

class AIDiagnosticRequestBody(BaseModel):
    system_type: Optional[str] = None
    refrigerant: Optional[str] = None
    readings_std: StandardReadings = Field(default_factory=dict)
    user_notes: Optional[str] = None
    location_address: Optional[str] = None
    equipment_model: Optional[str] = None
    equipment_serial: Optional[str] = None


class ReadingsBody(BaseModel):
    readings: List[Reading] = Field(default_factory=list)
