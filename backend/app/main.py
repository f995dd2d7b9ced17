import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import ALLOWED_ORIGINS, setup_logging
from app.middleware.error_handler import (
    configuration_error_handler,
    diagnostic_error_handler,
    traceback_exception_handler,
)
from app.routes import diagnostics, readings
from core.environment import get_generator_settings
from services.error_types import ConfigurationError, DiagnosticError

setup_logging()
logger = logging.getLogger(__name__)

if not get_generator_settings().is_configured:
    logger.warning("GEMINI_API_KEY not set in environment; AI diagnostics will be rejected")

app = FastAPI(
    title="HVAC Diagnostics API",
    version="1.0.0",
    description="Reading standardization, range validation and AI-assisted HVAC diagnostics"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(DiagnosticError, diagnostic_error_handler)
app.add_exception_handler(Exception, traceback_exception_handler)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"RESPONSE: {response.status_code} {request.method} {request.url.path}")
    return response


app.include_router(diagnostics.router)
app.include_router(readings.router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
