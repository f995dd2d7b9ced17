"""
Unit conversion utilities for standardizing HVAC measurements.

Every numeric reading is converted into the canonical unit of its quantity
family before it is validated or sent to the generator:

- temperature: °F
- pressure: PSIG
- airflow: CFM

Electrical units (V, A, W) and static pressure (in. w.c.) have no alternate
unit and pass through unchanged.
"""

import logging
import math
from typing import List, Union

from models.enums import UnitTag
from services.error_types import UnsupportedUnitError

logger = logging.getLogger(__name__)

KPA_TO_PSI = 0.145038
LPS_TO_CFM = 2.11888

TEMPERATURE_UNITS = (UnitTag.fahrenheit, UnitTag.celsius)
PRESSURE_UNITS = (UnitTag.psi, UnitTag.kpa)
AIRFLOW_UNITS = (UnitTag.cfm, UnitTag.liters_per_second)
PASSTHROUGH_UNITS = (UnitTag.volts, UnitTag.amps, UnitTag.watts, UnitTag.inches_water_column)

NUMERIC_UNITS: List[UnitTag] = [unit for unit in UnitTag if unit.is_numeric]

UnitLike = Union[UnitTag, str]


def _as_unit(unit: UnitLike) -> UnitTag:
    try:
        return UnitTag(unit)
    except ValueError:
        raise UnsupportedUnitError(str(unit), "a known unit")


def to_fahrenheit(value: float, unit: UnitLike) -> float:
    """Convert a temperature to °F"""
    unit = _as_unit(unit)
    if unit == UnitTag.fahrenheit:
        return value
    if unit == UnitTag.celsius:
        return value * 9 / 5 + 32
    raise UnsupportedUnitError(unit.value, "°F")


def to_psi(value: float, unit: UnitLike) -> float:
    """Convert a pressure to PSI(G)"""
    unit = _as_unit(unit)
    if unit == UnitTag.psi:
        return value
    if unit == UnitTag.kpa:
        return value * KPA_TO_PSI
    raise UnsupportedUnitError(unit.value, "PSI")


def to_cfm(value: float, unit: UnitLike) -> float:
    """Convert an airflow to CFM"""
    unit = _as_unit(unit)
    if unit == UnitTag.cfm:
        return value
    if unit == UnitTag.liters_per_second:
        return value * LPS_TO_CFM
    raise UnsupportedUnitError(unit.value, "CFM")


def standardize_value(value: float, unit: UnitLike) -> float:
    """
    Express a numeric reading in the canonical unit of its family.

    Args:
        value: Reading value in ``unit``
        unit: Unit the technician entered the value in

    Returns:
        Value in °F, PSIG or CFM (or unchanged for V, A, W, in. w.c.)

    Raises:
        UnsupportedUnitError: for non-numeric tags (text, yes/no) or unknown units
    """
    unit = _as_unit(unit)

    if unit in TEMPERATURE_UNITS:
        return to_fahrenheit(value, unit)
    if unit in PRESSURE_UNITS:
        return to_psi(value, unit)
    if unit in AIRFLOW_UNITS:
        return to_cfm(value, unit)
    if unit in PASSTHROUGH_UNITS:
        return value

    raise UnsupportedUnitError(unit.value, "a numeric unit")


def standard_unit(unit: UnitLike) -> str:
    """Canonical display unit for the family ``unit`` belongs to"""
    unit = _as_unit(unit)
    if unit in TEMPERATURE_UNITS:
        return UnitTag.fahrenheit.value
    if unit in PRESSURE_UNITS:
        return 'PSIG'
    if unit in AIRFLOW_UNITS:
        return UnitTag.cfm.value
    return unit.value


def parse_number(text: str) -> float:
    """
    Parse a technician-entered value as a finite real number.

    Raises:
        ValueError: if the text is blank, not numeric, or not finite
    """
    if text is None or not str(text).strip():
        raise ValueError("blank value")
    text = str(text).strip()
    if "_" in text:
        raise ValueError(f"not a plain number: {text}")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value: {text}")
    return number


def is_valid_number(text: str) -> bool:
    """True when ``text`` is parseable as a finite real number"""
    try:
        parse_number(text)
    except (TypeError, ValueError):
        return False
    return True


def relevant_units(parameter: str) -> List[UnitTag]:
    """Unit choices that make sense for a free-text parameter label"""
    lower = parameter.lower()

    if 'cfm' in lower or 'flow' in lower:
        return list(AIRFLOW_UNITS)
    if 'temp' in lower or 'air' in lower:
        return list(TEMPERATURE_UNITS)
    if 'static' in lower:
        return [UnitTag.inches_water_column]
    if 'pressure' in lower:
        return list(PRESSURE_UNITS)
    if 'volt' in lower:
        return [UnitTag.volts]
    if 'amp' in lower or 'current' in lower:
        return [UnitTag.amps]
    if 'watt' in lower or 'power' in lower:
        return [UnitTag.watts]

    return list(NUMERIC_UNITS)
