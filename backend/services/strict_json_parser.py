"""
Strict JSON Parser - turns raw generator text into a DiagnosticResult
Handles markdown fences and stray control characters, then maps the parsed
object onto the typed result with explicit defaults
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from models.enums import FaultSeverity, ResultStatus, SystemStatus
from models.schemas import DiagnosticFault, DiagnosticMetrics, DiagnosticResult, utc_timestamp
from services.error_types import UpstreamParseError

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "Diagnostic analysis completed. See details below."
FALLBACK_RECOMMENDATION = "Review system readings and consult HVAC technician"

# Repair is bounded to these two passes: fence extraction, then sanitization
JSON_FENCE_PATTERN = re.compile(r'```(?:json)?\s*(\{.*?\})\s*```', re.DOTALL)
NEWLINE_PATTERN = re.compile(r'(?:\r\n|\r|\n)+')
CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x1f\x7f-\x9f]')

FAULT_TEXT_FIELDS = ("component", "issue", "explanation", "recommended_action")

LOG_EXCERPT_CHARS = 500


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class StrictJSONParser:
    """Parse generator output into a DiagnosticResult, liberal on fields and strict on structure"""

    @staticmethod
    def extract_fenced(content: str) -> str:
        """
        Return the first fenced ``{...}`` block if there is one, otherwise the text unchanged

        Args:
            content: Raw response text from the generator

        Returns:
            Working text for the sanitization pass
        """
        match = JSON_FENCE_PATTERN.search(content)
        if match:
            logger.debug("Extracted JSON object from markdown fence")
            return match.group(1)
        return content

    @staticmethod
    def sanitize(content: str) -> str:
        """Newline runs become one space, remaining C0/C1 control characters are dropped, then trim"""
        content = NEWLINE_PATTERN.sub(' ', content)
        content = CONTROL_CHAR_PATTERN.sub('', content)
        return content.strip()

    @staticmethod
    def load_object(raw_text: str) -> Dict[str, Any]:
        """
        Run both repair passes and decode strictly

        Raises:
            UpstreamParseError: the repaired text is not a JSON object
        """
        if raw_text is None or not raw_text.strip():
            raise UpstreamParseError("Empty response content from generator")

        content = StrictJSONParser.sanitize(StrictJSONParser.extract_fenced(raw_text))

        try:
            parsed = json.loads(content, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            logger.error(f"Failed to parse model response (first {LOG_EXCERPT_CHARS} chars): {raw_text[:LOG_EXCERPT_CHARS]}")
            raise UpstreamParseError(f"Failed to parse model response: {e}", raw_excerpt=raw_text[:LOG_EXCERPT_CHARS])

        if not isinstance(parsed, dict):
            logger.error(f"Model response is JSON but not an object: {type(parsed).__name__}")
            raise UpstreamParseError(
                f"Failed to parse model response: expected a JSON object, got {type(parsed).__name__}",
                raw_excerpt=raw_text[:LOG_EXCERPT_CHARS]
            )

        return parsed

    @staticmethod
    def coerce_system_status(value: Any) -> SystemStatus:
        if isinstance(value, str) and value in SystemStatus._value2member_map_:
            return SystemStatus(value)
        if value:
            logger.warning(f"Unknown system_status {value!r}, using attention_needed")
        return SystemStatus.attention_needed

    @staticmethod
    def coerce_confidence(value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or value < 0 or value > 100:
            return None
        return value

    @staticmethod
    def coerce_faults(value: Any) -> List[DiagnosticFault]:
        if not isinstance(value, list):
            return []

        faults = []
        for i, item in enumerate(value):
            if not isinstance(item, dict):
                logger.debug(f"Dropping fault {i}: not an object")
                continue

            severity = item.get("severity")
            if not isinstance(severity, str) or severity not in FaultSeverity._value2member_map_:
                severity = FaultSeverity.warning.value

            texts = {}
            for name in FAULT_TEXT_FIELDS:
                text = item.get(name)
                texts[name] = "" if text is None else str(text)

            faults.append(DiagnosticFault(
                severity=severity,
                confidence=StrictJSONParser.coerce_confidence(item.get("confidence")),
                **texts
            ))
        return faults

    @staticmethod
    def coerce_recommendations(value: Any) -> List[str]:
        if not isinstance(value, list):
            return [FALLBACK_RECOMMENDATION]
        return [item if isinstance(item, str) else str(item) for item in value if item is not None]

    @staticmethod
    def parse(raw_text: str, model_id: str) -> DiagnosticResult:
        """
        Parse raw generator text into a success-status DiagnosticResult

        Args:
            raw_text: Text exactly as the generator returned it
            model_id: Model identifier from the request; never taken from the response

        Returns:
            DiagnosticResult with status "success"

        Raises:
            UpstreamParseError: no JSON object could be recovered
        """
        parsed = StrictJSONParser.load_object(raw_text)

        metrics = parsed.get("metrics")
        summary = parsed.get("summary")

        result = DiagnosticResult(
            status=ResultStatus.success,
            system_status=StrictJSONParser.coerce_system_status(parsed.get("system_status")),
            faults=StrictJSONParser.coerce_faults(parsed.get("faults")),
            metrics=DiagnosticMetrics.model_validate(metrics if isinstance(metrics, dict) else {}),
            summary=summary if isinstance(summary, str) and summary else FALLBACK_SUMMARY,
            recommendations=StrictJSONParser.coerce_recommendations(parsed.get("recommendations")),
            timestamp=utc_timestamp(),
            model_used=model_id
        )

        logger.info(
            f"Parsed diagnostic response: status={result.system_status.value}, "
            f"{len(result.faults)} faults, {len(result.recommendations)} recommendations"
        )
        return result


# Global parser instance
strict_parser = StrictJSONParser()
