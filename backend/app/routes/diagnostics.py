from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, Optional
import logging

from app.middleware.error_handler import rejected_result
from core.environment import GeneratorSettings, get_generator_settings
from domain.readings.field_templates import all_system_types, get_template
from models.enums import SystemType
from models.schemas import AIDiagnosticRequestBody, DiagnosticRequest, utc_timestamp
from services.diagnostic_service import analyze_system
from services.error_types import ConfigurationError
from services.generator_client import GeneratorClient, available_models

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["diagnostics"])


def get_generator() -> Optional[GeneratorClient]:
    """None means analyze_system builds the configured OpenAI-compatible client"""
    return None


@router.get("/system-types")
async def list_system_types():
    return {
        "system_types": all_system_types(),
        "timestamp": utc_timestamp()
    }


@router.get("/models")
async def list_models():
    return {"models": available_models()}


@router.get("/system-templates/{system_type}")
async def get_system_template(system_type: str) -> Dict[str, Any]:
    template = get_template(system_type)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown system type: {system_type}")

    return {
        "system_type": template.system_type.value,
        "sections": [
            {
                "name": section.name,
                "fields": [
                    {
                        "parameter": f.parameter,
                        "unit": f.unit.value,
                        "section": f.section,
                        "placeholder": f.placeholder,
                        "isRequired": f.is_required,
                        "priority_modes": [mode.value for mode in f.priority_modes],
                    }
                    for f in section.fields
                ]
            }
            for section in template.sections
        ]
    }


@router.post("/diagnostics/ai")
async def run_ai_diagnostic(
    body: AIDiagnosticRequestBody,
    settings: GeneratorSettings = Depends(get_generator_settings),
    generator: Optional[GeneratorClient] = Depends(get_generator),
):
    """Run one AI diagnostic. Always answers with a DiagnosticResult-shaped body."""
    if not settings.is_configured:
        raise ConfigurationError("System API key not configured")

    if body.system_type not in SystemType._value2member_map_:
        return rejected_result(
            400,
            "Valid system type is required",
            "Valid system type is required",
            [f"Available system types: {', '.join(all_system_types())}"]
        )

    if not body.readings_std:
        return rejected_result(400, "System readings are required", "System readings are required")

    request = DiagnosticRequest(
        system_type=SystemType(body.system_type),
        refrigerant=body.refrigerant,
        readings=body.readings_std,
        user_notes=body.user_notes,
        model_id=settings.model_id,
        api_key=settings.api_key
    )

    logger.info(
        f"AI diagnostic request: model={settings.model_id} system_type={body.system_type} "
        f"refrigerant={body.refrigerant or 'none'} readings={len(body.readings_std)}"
    )

    result = await analyze_system(request, generator=generator, settings=settings)

    logger.info(
        f"AI diagnostic result: status={result.status.value} "
        f"system_status={result.system_status.value} faults={len(result.faults)}"
    )
    return result.to_wire()
