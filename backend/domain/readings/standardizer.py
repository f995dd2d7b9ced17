"""
Reading standardization: raw form rows -> canonical reading map.

This is what decides exactly what gets sent to the generator. Rows that are
incomplete or malformed are left out and reported back, never allowed to
fail the rest of the batch.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from domain.readings.parameters import ParameterNormalizer, default_normalizer
from domain.readings.units import parse_number, standardize_value
from models.schemas import Reading, SkippedReading, StandardizationResult

logger = logging.getLogger(__name__)

SKIP_MISSING_PARAMETER = "missing parameter name"
SKIP_MISSING_VALUE = "missing value"
SKIP_EMPTY_KEY = "parameter name has no usable characters"
SKIP_NOT_A_NUMBER = "value is not a finite number"


class ReadingStandardizer:
    """
    Folds a list of Reading rows into StandardReadings.

    Numeric rows are converted to the canonical unit of their family (°F,
    PSIG, CFM); text and yes/no rows are passed through as the raw string.
    When two rows normalize to the same key the later row wins.
    """

    def __init__(self, normalizer: Optional[ParameterNormalizer] = None):
        self.normalizer = normalizer or default_normalizer

    def standardize(self, readings: Iterable[Reading]) -> StandardizationResult:
        canonical: Dict[str, Union[int, float, str]] = {}
        skipped: List[SkippedReading] = []

        def skip(reading: Reading, reason: str):
            skipped.append(SkippedReading(reading_id=reading.id, parameter=reading.parameter or "", reason=reason))
            logger.debug(f"Skipping reading {reading.id} ({reading.parameter!r}): {reason}")

        for reading in readings:
            if not reading.parameter or not reading.parameter.strip():
                skip(reading, SKIP_MISSING_PARAMETER)
                continue
            if not reading.value or not reading.value.strip():
                skip(reading, SKIP_MISSING_VALUE)
                continue

            key = self.normalizer.normalize(reading.parameter)
            if not key:
                skip(reading, SKIP_EMPTY_KEY)
                continue

            if reading.unit.is_numeric:
                try:
                    number = parse_number(reading.value)
                except ValueError:
                    skip(reading, SKIP_NOT_A_NUMBER)
                    continue
                value: Union[int, float, str] = standardize_value(number, reading.unit)
            else:
                value = reading.value

            if key in canonical:
                logger.debug(f"Reading {reading.id} overwrites earlier value for {key}")
            canonical[key] = value

        return StandardizationResult(readings=canonical, skipped=skipped)


default_standardizer = ReadingStandardizer()


def standardize_readings(readings: Iterable[Reading]) -> StandardizationResult:
    """Standardize with the default alias table"""
    return default_standardizer.standardize(readings)
