"""
Logging helpers for the diagnostic round trip.

Context dicts (model id, system type, reading count, ...) are rendered into
the message as sorted ``key=value`` pairs so plain-text log lines stay
greppable, and are also attached as ``extra`` for structured handlers.
Credential keys are always masked.
"""

import time
import logging
from typing import Dict, Any, Iterator, Optional
from contextlib import contextmanager

logger = logging.getLogger(__name__)

SECRET_KEYS = frozenset({"api_key", "authorization"})
MASK = "***"


def safe_context(context: Dict[str, Any]) -> Dict[str, Any]:
    return {key: MASK if key in SECRET_KEYS else value for key, value in context.items()}


def describe_context(context: Dict[str, Any]) -> str:
    """``{"b": 2, "a": 1}`` -> ``"a=1 b=2"``"""
    return " ".join(f"{key}={value}" for key, value in sorted(safe_context(context).items()))


@contextmanager
def log_operation(operation_name: str, context: Dict[str, Any],
                  base_logger: Optional[logging.Logger] = None) -> Iterator[None]:
    """
    Log start, completion or failure of one step with its elapsed time.

    Usage:
        with log_operation("generator_call", {"model_id": "gemini-2.0-flash", "reading_count": 4}):
            raw_text = await generator.generate(prompt, model_id)
    """
    log = base_logger or logger
    extra = {"operation": operation_name, "context": safe_context(context)}
    started = time.perf_counter()

    log.info(f"{operation_name} started ({describe_context(context)})", extra=extra)

    try:
        yield
    except Exception as e:
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.error(
            f"{operation_name} failed after {elapsed_ms:.0f}ms: {type(e).__name__}: {e}",
            extra={**extra, "duration_ms": elapsed_ms, "error_type": type(e).__name__}
        )
        raise
    else:
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info(f"{operation_name} completed in {elapsed_ms:.0f}ms", extra={**extra, "duration_ms": elapsed_ms})


def log_with_context(level: str, message: str, context: Dict[str, Any],
                     base_logger: Optional[logging.Logger] = None):
    """
    Log ``message`` at ``level`` (debug, info, warning, error) with the
    context appended; unknown level names log at INFO.
    """
    log = base_logger or logger
    levelno = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(levelno, int):
        levelno = logging.INFO
    if context:
        message = f"{message} ({describe_context(context)})"
    log.log(levelno, message, extra={"context": safe_context(context)})


class OperationLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the request id and records it as ``operation_id``"""

    def process(self, msg, kwargs):
        operation_id = self.extra["operation_id"]
        kwargs.setdefault("extra", {})["operation_id"] = operation_id
        return f"[{operation_id}] {msg}", kwargs


def create_operation_logger(operation_id: str,
                            base_logger: Optional[logging.Logger] = None) -> OperationLoggerAdapter:
    return OperationLoggerAdapter(base_logger or logger, {"operation_id": operation_id})
