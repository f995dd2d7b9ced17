"""
Diagnostic Service - the one entry point for an AI diagnostic round trip

validate -> build prompt -> generator call -> parse. Every failure on the way
is folded into an error-status DiagnosticResult, so callers only ever handle
one response shape.
"""

import logging
from typing import Optional
from uuid import uuid4

from core.environment import GeneratorSettings, get_generator_settings
from models.enums import ResultStatus, SystemStatus
from models.schemas import DiagnosticRequest, DiagnosticResult, utc_timestamp
from services.diagnostic_prompts import DiagnosticPromptBuilder, prompt_builder
from services.error_types import DiagnosticError, MissingFieldError, log_error_with_context
from services.generator_client import GeneratorClient, OpenAICompatibleGenerator
from services.strict_json_parser import strict_parser
from utils.logging_utils import create_operation_logger, log_operation

logger = logging.getLogger(__name__)

ERROR_SUMMARY = "Failed to analyze system"
ERROR_RECOMMENDATION = "Please check API configuration and try again"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


def validate_request(request: DiagnosticRequest) -> None:
    """
    Fail fast on the first missing mandatory field, before any work is done

    Raises:
        MissingFieldError: naming the field
    """
    if not request.api_key:
        raise MissingFieldError("api_key", "API key is required")
    if not request.model_id:
        raise MissingFieldError("model_id", "Model ID is required")
    if not request.system_type:
        raise MissingFieldError("system_type", "System type is required")
    if not request.readings:
        raise MissingFieldError("readings_std", "System readings are required")


def build_error_result(model_id: Optional[str], error_message: str) -> DiagnosticResult:
    """The fixed error-shaped result every failure converges on"""
    return DiagnosticResult(
        status=ResultStatus.error,
        system_status=SystemStatus.critical,
        faults=[],
        metrics={},
        summary=ERROR_SUMMARY,
        recommendations=[ERROR_RECOMMENDATION],
        timestamp=utc_timestamp(),
        model_used=model_id or "unknown",
        error_message=error_message or UNKNOWN_ERROR_MESSAGE
    )


def _error_message(error: Exception) -> str:
    if isinstance(error, DiagnosticError):
        return error.message
    return str(error)


async def analyze_system(
    request: DiagnosticRequest,
    generator: Optional[GeneratorClient] = None,
    settings: Optional[GeneratorSettings] = None,
    builder: Optional[DiagnosticPromptBuilder] = None
) -> DiagnosticResult:
    """
    Run one diagnostic round trip. Never raises.

    Args:
        request: Immutable request; produces exactly one generator call
        generator: GeneratorClient to use; an OpenAICompatibleGenerator is
            built from ``settings`` (or the environment) when omitted
        settings: Generator settings for the default client
        builder: Prompt builder, defaults to the module-level one

    Returns:
        DiagnosticResult with status "success", or status "error" carrying
        the failure message in ``error_message``
    """
    request_id = uuid4().hex[:8]
    op_logger = create_operation_logger(request_id, logger)
    owned_generator: Optional[OpenAICompatibleGenerator] = None

    system_type = request.system_type.value if request.system_type else None
    context = {
        "request_id": request_id,
        "model_id": request.model_id,
        "system_type": system_type,
        "refrigerant": request.refrigerant or "none",
        "reading_count": len(request.readings),
    }

    try:
        validate_request(request)

        op_logger.info(
            f"Analyzing {system_type} with model {request.model_id} "
            f"(refrigerant={context['refrigerant']}, readings={context['reading_count']})"
        )

        prompt = (builder or prompt_builder).build(request)

        if generator is None:
            base = settings or get_generator_settings()
            owned_generator = OpenAICompatibleGenerator(GeneratorSettings(
                api_key=request.api_key,
                model_id=request.model_id,
                base_url=base.base_url,
                timeout_seconds=base.timeout_seconds,
                temperature=base.temperature,
                max_output_tokens=base.max_output_tokens,
                stream=base.stream
            ))
            generator = owned_generator

        with log_operation("generator_call", context, logger):
            raw_text = await generator.generate(prompt, request.model_id)

        result = strict_parser.parse(raw_text, request.model_id)

        op_logger.info(
            f"Diagnostic complete: status={result.status.value}, "
            f"system_status={result.system_status.value}, faults={len(result.faults)}"
        )
        return result

    except DiagnosticError as e:
        log_error_with_context(e, context)
        return build_error_result(request.model_id, _error_message(e))
    except Exception as e:
        op_logger.exception(f"Unexpected diagnostic failure: {type(e).__name__}: {e}")
        return build_error_result(request.model_id, _error_message(e))
    finally:
        if owned_generator is not None:
            await owned_generator.aclose()
