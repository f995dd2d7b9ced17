from fastapi import APIRouter, Query
from pydantic import BaseModel, Field
import logging

from domain.readings import units
from domain.readings.standardizer import standardize_readings
from domain.validation.range_validator import default_range_validator
from models.enums import UnitTag
from models.schemas import ReadingsBody
from utils.logging_utils import log_with_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["readings"])


class UnitValueBody(BaseModel):
    value: float = Field(..., allow_inf_nan=False)
    unit: UnitTag


@router.post("/readings/standardize")
async def standardize(body: ReadingsBody):
    """Fold raw form rows into the canonical reading map sent to the generator"""
    result = standardize_readings(body.readings)
    if result.skipped:
        log_with_context(
            "info",
            f"Standardized {len(result.readings)} readings, skipped {len(result.skipped)}",
            {"skipped": [skipped.reading_id for skipped in result.skipped]},
            logger
        )
    return {
        "readings_std": result.readings,
        "skipped": [skipped.model_dump() for skipped in result.skipped]
    }


@router.post("/readings/validate")
async def validate(body: ReadingsBody):
    summary = default_range_validator.validate_all_readings(body.readings)
    return summary.to_dict()


@router.get("/units/relevant")
async def relevant_units(parameter: str = Query("", description="Free-text parameter label")):
    suggested = default_range_validator.suggested_unit(parameter) if parameter.strip() else None
    return {
        "parameter": parameter,
        "units": [unit.value for unit in units.relevant_units(parameter)],
        "suggested_unit": suggested.value if suggested else None
    }


@router.post("/units/standardize")
async def standardize_unit_value(body: UnitValueBody):
    """Convert one value to its canonical unit; non-numeric units are rejected with 400"""
    return {
        "value": units.standardize_value(body.value, body.unit),
        "unit": units.standard_unit(body.unit)
    }
