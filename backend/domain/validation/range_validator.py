"""
Range Validation for HVAC Readings

Judges canonical readings (°F, PSI, CFM, V, A, W, in. w.c.) against a table
of operating envelopes. Each entry has two bands:

- hard bounds: physically/electrically impossible outside them -> error
- typical (warning) bounds: unusual but possible outside them -> warning

Validity and typicality are independent: a reading can be valid and still
carry a warning. Only hard-bound violations block a submission.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domain.readings import units
from domain.readings.parameters import ParameterNormalizer, default_normalizer
from models.enums import UnitTag

logger = logging.getLogger(__name__)

# Unknown parameters are only flagged when their magnitude leaves this band
UNKNOWN_PARAMETER_MIN = -1000
UNKNOWN_PARAMETER_MAX = 1_000_000

HVAC_KEYWORDS = (
    'temp', 'temperature', 'pressure', 'voltage', 'amperage', 'amp', 'volt',
    'cfm', 'airflow', 'static', 'suction', 'discharge', 'liquid', 'gas',
    'supply', 'return', 'outdoor', 'indoor', 'coil', 'evaporator', 'condenser',
    'superheat', 'subcool', 'delta', 'approach', 'wattage', 'power', 'line',
)


class ValidationSeverity(Enum):
    """Validation finding severity levels"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ParameterRange:
    """Operating envelope for one canonical parameter"""
    min: float
    max: float
    unit: UnitTag
    warning_min: Optional[float] = None
    warning_max: Optional[float] = None

    def __post_init__(self):
        bounds = [self.min]
        if self.warning_min is not None:
            bounds.append(self.warning_min)
        if self.warning_max is not None:
            bounds.append(self.warning_max)
        bounds.append(self.max)
        if bounds != sorted(bounds):
            raise ValueError(
                f"Range bounds must satisfy min <= warning_min <= warning_max <= max, got {bounds}"
            )

    @property
    def unit_label(self) -> str:
        return self.unit.value

    def typical_range_text(self) -> str:
        if self.warning_min is not None and self.warning_max is not None:
            return f"{_fmt(self.warning_min)}-{_fmt(self.warning_max)} {self.unit_label}"
        if self.warning_min is not None:
            return f"at least {_fmt(self.warning_min)} {self.unit_label}"
        return f"at most {_fmt(self.warning_max)} {self.unit_label}"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one value"""
    is_valid: bool
    error: Optional[str] = None
    warning: Optional[str] = None
    severity: Optional[ValidationSeverity] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"isValid": self.is_valid}
        if self.error is not None:
            payload["error"] = self.error
        if self.warning is not None:
            payload["warning"] = self.warning
        if self.severity is not None:
            payload["severity"] = self.severity.value
        return payload


@dataclass
class ReadingsValidationSummary:
    """Roll-up of validating a whole form"""
    is_valid: bool
    has_warnings: bool
    error_count: int
    warning_count: int
    results: List[ValidationResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "hasWarnings": self.has_warnings,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "results": [result.to_dict() for result in self.results],
        }


def _fmt(number: float) -> str:
    return f"{number:g}"


_F = UnitTag.fahrenheit
_PSI = UnitTag.psi
_WC = UnitTag.inches_water_column

DEFAULT_RANGES: Mapping[str, ParameterRange] = MappingProxyType({
    # Temperatures (°F)
    'supply_air_temp': ParameterRange(-20, 200, _F, 40, 140),
    'return_air_temp': ParameterRange(-20, 150, _F, 50, 90),
    'outdoor_temp': ParameterRange(-40, 130, _F, -20, 120),
    'indoor_temp': ParameterRange(0, 120, _F, 55, 85),
    'liquid_line_temp': ParameterRange(-40, 200, _F, 50, 150),
    'suction_line_temp': ParameterRange(-40, 150, _F, 20, 80),
    'discharge_temp': ParameterRange(0, 250, _F, 100, 220),
    'coil_temp': ParameterRange(-40, 200, _F, 20, 120),
    'evaporator_temp': ParameterRange(-40, 100, _F, 20, 60),
    'condenser_temp': ParameterRange(0, 200, _F, 80, 160),

    # Pressures (PSI)
    'suction_pressure': ParameterRange(0, 200, _PSI, 30, 120),
    'discharge_pressure': ParameterRange(0, 650, _PSI, 100, 500),
    'liquid_line_pressure': ParameterRange(0, 650, _PSI, 100, 500),
    'gas_pressure': ParameterRange(0, 100, _PSI, 3, 15),
    'static_pressure': ParameterRange(0, 5, _WC, 0.2, 1.5),

    # Electrical
    'voltage': ParameterRange(0, 600, UnitTag.volts, 100, 480),
    'amperage': ParameterRange(0, 200, UnitTag.amps, 1, 100),
    'wattage': ParameterRange(0, 50000, UnitTag.watts, 100, 20000),

    # Airflow (CFM)
    'cfm': ParameterRange(0, 10000, UnitTag.cfm, 300, 5000),
    'airflow': ParameterRange(0, 10000, UnitTag.cfm, 300, 5000),

    # Derived values (°F)
    'superheat': ParameterRange(-20, 100, _F, 5, 25),
    'subcooling': ParameterRange(-20, 100, _F, 5, 20),
    'delta_t': ParameterRange(0, 50, _F, 14, 24),
})


def validate_numeric_value(value: str) -> ValidationResult:
    """Check that a form value is a finite number"""
    if value is None or not str(value).strip():
        return ValidationResult(False, error='Value is required', severity=ValidationSeverity.ERROR)

    text = str(value).strip()
    try:
        if '_' in text:
            raise ValueError(text)
        number = float(text)
    except ValueError:
        return ValidationResult(False, error='Value must be a valid number', severity=ValidationSeverity.ERROR)

    if not math.isfinite(number):
        return ValidationResult(False, error='Value must be finite', severity=ValidationSeverity.ERROR)

    return ValidationResult(True)


class RangeValidator:
    """
    Checks canonical (key, value) pairs against the operating envelope table.

    Policy: hard limits error, typical-range misses warn. Parameters missing
    from the table are never rejected because the alias table cannot cover
    every label a technician might type.
    """

    def __init__(
        self,
        ranges: Optional[Mapping[str, ParameterRange]] = None,
        normalizer: Optional[ParameterNormalizer] = None
    ):
        self.ranges: Mapping[str, ParameterRange] = MappingProxyType(
            dict(DEFAULT_RANGES if ranges is None else ranges)
        )
        self.normalizer = normalizer or default_normalizer

    def validate(self, key: str, value: float) -> ValidationResult:
        """
        Validate a value that is already in the canonical unit for ``key``.

        Both hard and typical bounds are inclusive.
        """
        if not math.isfinite(value):
            return ValidationResult(False, error='Value must be finite', severity=ValidationSeverity.ERROR)

        entry = self.ranges.get(key)
        if entry is None:
            if value < UNKNOWN_PARAMETER_MIN or value > UNKNOWN_PARAMETER_MAX:
                return ValidationResult(
                    True,
                    warning='Unusual value detected. Please verify this reading is correct.',
                    severity=ValidationSeverity.WARNING
                )
            return ValidationResult(True)

        if value < entry.min or value > entry.max:
            return ValidationResult(
                False,
                error=f"Value out of acceptable range ({_fmt(entry.min)}-{_fmt(entry.max)} {entry.unit_label})",
                severity=ValidationSeverity.ERROR
            )

        if entry.warning_min is not None and value < entry.warning_min:
            return ValidationResult(
                True,
                warning=f"Value is below typical range ({entry.typical_range_text()}). System may have issues.",
                severity=ValidationSeverity.WARNING
            )
        if entry.warning_max is not None and value > entry.warning_max:
            return ValidationResult(
                True,
                warning=f"Value is above typical range ({entry.typical_range_text()}). System may have issues.",
                severity=ValidationSeverity.WARNING
            )

        return ValidationResult(True)

    def validate_reading(self, parameter: str, value: str, unit: units.UnitLike) -> ValidationResult:
        """
        Validate one raw form row: the value as typed, in the unit chosen.

        Non-numeric rows (text, yes/no) only need a value.
        """
        unit = UnitTag(unit)
        if not unit.is_numeric:
            if value is None or not str(value).strip():
                return ValidationResult(False, error='Value is required', severity=ValidationSeverity.ERROR)
            return ValidationResult(True)

        numeric = validate_numeric_value(value)
        if not numeric.is_valid:
            return numeric

        if not parameter or not parameter.strip():
            return ValidationResult(False, error='Parameter name is required', severity=ValidationSeverity.ERROR)

        key = self.normalizer.normalize(parameter)
        canonical = units.standardize_value(float(str(value).strip()), unit)
        return self.validate(key, canonical)

    def validate_parameter_name(self, parameter: str) -> ValidationResult:
        """Flag labels that do not look like HVAC terminology (advisory only)"""
        if not parameter or not parameter.strip():
            return ValidationResult(False, error='Parameter name is required', severity=ValidationSeverity.ERROR)

        key = self.normalizer.normalize(parameter)
        if key in self.ranges or self.normalizer.is_canonical(key):
            return ValidationResult(True)

        has_keyword = any(keyword in key for keyword in HVAC_KEYWORDS)
        if not has_keyword and len(parameter.strip()) > 3:
            return ValidationResult(
                True,
                warning='Parameter name may not be standard HVAC terminology',
                severity=ValidationSeverity.INFO
            )

        return ValidationResult(True)

    def validate_all_readings(self, readings: Iterable[Any]) -> ReadingsValidationSummary:
        """
        Validate every row of a form.

        Accepts Reading models or anything with ``parameter``, ``value`` and
        ``unit`` attributes.
        """
        error_count = 0
        warning_count = 0
        results: List[ValidationResult] = []

        for reading in readings:
            name_check = self.validate_parameter_name(reading.parameter)
            value_check = self.validate_reading(reading.parameter, reading.value, reading.unit)

            if not name_check.is_valid:
                error_count += 1
                results.append(name_check)
            elif not value_check.is_valid:
                error_count += 1
                results.append(value_check)
            elif name_check.warning or value_check.warning:
                warning_count += 1
                source = name_check if name_check.warning else value_check
                results.append(ValidationResult(True, warning=source.warning, severity=source.severity))
            else:
                results.append(ValidationResult(True))

        logger.debug(f"Validated {len(results)} readings: {error_count} errors, {warning_count} warnings")

        return ReadingsValidationSummary(
            is_valid=error_count == 0,
            has_warnings=warning_count > 0,
            error_count=error_count,
            warning_count=warning_count,
            results=results
        )

    def suggested_unit(self, parameter: str) -> Optional[UnitTag]:
        """Unit the range table expects for ``parameter``, if it is known"""
        entry = self.ranges.get(self.normalizer.normalize(parameter))
        return entry.unit if entry else None


default_range_validator = RangeValidator()
