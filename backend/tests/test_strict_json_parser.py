import json
import logging

import pytest

from models.enums import FaultSeverity, ResultStatus, SystemStatus
from services.error_types import UpstreamParseError
from services.strict_json_parser import (
    FALLBACK_RECOMMENDATION,
    FALLBACK_SUMMARY,
    StrictJSONParser,
    strict_parser,
)

MODEL = "gemini-2.0-flash"


class TestRepairPasses:

    def test_fenced_json(self):
        raw = '```json\n{"summary":"ok","faults":[],"metrics":{},"recommendations":[]}\n```'
        result = strict_parser.parse(raw, MODEL)
        assert result.summary == "ok"
        assert result.status == ResultStatus.success

    def test_untagged_fence_inside_prose(self):
        raw = 'Here is my analysis:\n```\n{"summary": "fenced"}\n```\nLet me know!'
        assert strict_parser.parse(raw, MODEL).summary == "fenced"

    def test_literal_newlines_inside_strings(self):
        raw = '{"summary": "Line one\nline two\r\nline three"}'
        assert strict_parser.parse(raw, MODEL).summary == "Line one line two line three"

    def test_control_characters_stripped(self):
        raw = '\x00{"summary": "ok\x07ay", "system_status": "normal"}\x1f'
        result = strict_parser.parse(raw, MODEL)
        assert result.summary == "okay"
        assert result.system_status == SystemStatus.normal

    def test_sanitize_order(self):
        assert StrictJSONParser.sanitize("  a\n\nb\tc\x85d  ") == "a bcd"

    @pytest.mark.parametrize("raw", [
        "not json at all",
        '{"summary": "trailing comma",}',
        "```json\n{broken}\n```",
        "",
        "   ",
        '["a", "list"]',
        '{"summary": NaN}',
    ])
    def test_irrecoverable_input_fails_closed(self, raw):
        with pytest.raises(UpstreamParseError):
            strict_parser.parse(raw, MODEL)

    def test_parse_error_keeps_excerpt(self):
        raw = "x" * 2000
        with pytest.raises(UpstreamParseError) as exc_info:
            strict_parser.parse(raw, MODEL)
        assert exc_info.value.message.startswith("Failed to parse model response:")
        assert len(exc_info.value.raw_excerpt) == 500

    def test_deeply_nested_json_fails_closed(self):
        raw = '{"summary": ' + '[' * 100000 + ']' * 100000 + '}'
        with pytest.raises(UpstreamParseError) as exc_info:
            strict_parser.parse(raw, MODEL)
        assert exc_info.value.message.startswith("Failed to parse model response:")


class TestFieldDefaulting:

    def test_missing_optional_fields(self):
        result = strict_parser.parse('{"summary":"fine"}', MODEL)
        assert result.system_status == SystemStatus.attention_needed
        assert result.faults == []
        assert result.metrics.model_dump() == {}
        assert result.recommendations == [FALLBACK_RECOMMENDATION]
        assert result.summary == "fine"

    def test_empty_object(self):
        result = strict_parser.parse("{}", MODEL)
        assert result.summary == FALLBACK_SUMMARY
        assert result.error_message is None

    def test_wrong_types_default(self):
        raw = json.dumps({
            "system_status": "on fire",
            "faults": "none",
            "metrics": [1, 2],
            "summary": 7,
            "recommendations": "call someone"
        })
        result = strict_parser.parse(raw, MODEL)
        assert result.system_status == SystemStatus.attention_needed
        assert result.faults == []
        assert result.metrics.model_dump() == {}
        assert result.summary == FALLBACK_SUMMARY
        assert result.recommendations == [FALLBACK_RECOMMENDATION]

    def test_model_used_comes_from_request(self):
        result = strict_parser.parse('{"model_used": "gpt-4", "status": "error"}', MODEL)
        assert result.model_used == MODEL
        assert result.status == ResultStatus.success

    def test_timestamp_stamped_at_parse_time(self):
        result = strict_parser.parse('{"timestamp": "1999-01-01T00:00:00Z"}', MODEL)
        assert result.timestamp != "1999-01-01T00:00:00Z"
        assert result.timestamp.endswith("Z")

    def test_fault_coercion(self):
        raw = json.dumps({"faults": [
            {"severity": "catastrophic", "component": "Compressor", "issue": "Locked rotor",
             "explanation": "High amps", "recommended_action": "Replace", "confidence": 140},
            "not an object",
            {"severity": "critical", "confidence": 75.5},
        ]})
        faults = strict_parser.parse(raw, MODEL).faults
        assert len(faults) == 2
        assert faults[0].severity == FaultSeverity.warning
        assert faults[0].confidence is None
        assert faults[1].severity == FaultSeverity.critical
        assert faults[1].component == ""
        assert faults[1].confidence == 75.5


class TestMetrics:

    def test_typed_and_extra_metrics_round_trip(self):
        metrics = {
            "delta_t": 20,
            "superheat": None,
            "subcooling": 8.5,
            "efficiency_rating": "good",
            "approach_temp": 12,
            "notes": "estimated",
        }
        result = strict_parser.parse(json.dumps({"metrics": metrics}), MODEL)
        assert result.metrics.delta_t == 20
        assert result.metrics.extras == {"approach_temp": 12, "notes": "estimated"}
        assert result.to_wire()["metrics"] == metrics

    def test_ill_typed_known_metric_kept_as_extra(self):
        raw = json.dumps({"metrics": {"delta_t": "about 20", "efficiency_rating": "stellar", "nested": {"a": 1}}})
        result = strict_parser.parse(raw, MODEL)
        assert result.metrics.delta_t is None
        assert result.to_wire()["metrics"] == {"delta_t": "about 20", "efficiency_rating": "stellar"}

    def test_nested_metrics_dropped_with_debug_log(self, caplog):
        raw = json.dumps({"metrics": {"delta_t": 20, "pressures": {"a": 1}, "extras": "n"}})
        with caplog.at_level(logging.DEBUG, logger="models.schemas"):
            result = strict_parser.parse(raw, MODEL)
        assert result.to_wire()["metrics"] == {"delta_t": 20}
        assert "Dropping metric 'pressures'" in caplog.text
        assert "Dropping metric 'extras'" in caplog.text


def test_wire_shape_has_no_error_message_on_success():
    wire = strict_parser.parse('{"summary":"ok"}', MODEL).to_wire()
    assert set(wire) == {
        "status", "system_status", "faults", "metrics", "summary",
        "recommendations", "timestamp", "model_used",
    }
