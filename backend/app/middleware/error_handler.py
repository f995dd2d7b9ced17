from fastapi import Request
from fastapi.responses import JSONResponse
import traceback
import logging
from typing import Dict, Any, List, Optional

from app.config import ALLOWED_ORIGINS, DEBUG
from models.enums import ResultStatus, SystemStatus
from models.schemas import DiagnosticResult
from services.error_types import ConfigurationError, DiagnosticError, InputError, UpstreamError

logger = logging.getLogger(__name__)


def create_error_response(error_type: str, message: str) -> Dict[str, Any]:
    """Create structured error response"""
    return {
        "error": {
            "type": error_type,
            "message": message
        }
    }


def rejected_result(status_code: int, summary: str, error_message: str,
                    recommendations: Optional[List[str]] = None) -> JSONResponse:
    """Error-shaped DiagnosticResult for requests that never reached the generator"""
    result = DiagnosticResult(
        status=ResultStatus.error,
        system_status=SystemStatus.critical,
        summary=summary,
        recommendations=recommendations or [],
        model_used="none",
        error_message=error_message
    )
    return JSONResponse(status_code=status_code, content=result.to_wire())


def status_code_for(exc: DiagnosticError) -> int:
    if isinstance(exc, InputError):
        return 400
    if isinstance(exc, UpstreamError):
        return 502
    return 500


def add_cors_headers(request: Request, response: JSONResponse) -> JSONResponse:
    """Error responses bypass CORSMiddleware, so mirror its headers here"""
    origin = request.headers.get("origin")
    if origin in ALLOWED_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "*"
    return response


async def diagnostic_error_handler(request: Request, exc: DiagnosticError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")

    response = JSONResponse(
        status_code=status_code,
        content=create_error_response(type(exc).__name__, exc.message)
    )
    return add_cors_headers(request, response)


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"ConfigurationError on {request.method} {request.url.path}: {exc}")
    response = rejected_result(500, "System not configured. Please contact administrator.", exc.message)
    return add_cors_headers(request, response)


async def traceback_exception_handler(request: Request, exc: Exception):
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(tb)

    if DEBUG:
        content = create_error_response("InternalServerError", tb)
    else:
        content = create_error_response("InternalServerError", "Internal server error")

    response = JSONResponse(status_code=500, content=content)
    return add_cors_headers(request, response)
