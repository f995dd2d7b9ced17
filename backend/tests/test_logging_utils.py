import logging

import pytest

from utils.logging_utils import (
    create_operation_logger,
    describe_context,
    log_operation,
    log_with_context,
)

test_logger = logging.getLogger("tests.logging_utils")


def test_describe_context_sorts_and_masks_credentials():
    context = {"system_type": "Gas Pack Unit", "api_key": "sk-secret", "model_id": "gemini-2.0-flash"}
    assert describe_context(context) == "api_key=*** model_id=gemini-2.0-flash system_type=Gas Pack Unit"


class TestLogOperation:

    def test_completed(self, caplog):
        with caplog.at_level(logging.INFO, logger="tests.logging_utils"):
            with log_operation("generator_call", {"reading_count": 2, "api_key": "sk-secret"}, test_logger):
                pass

        messages = [record.getMessage() for record in caplog.records]
        assert messages[0] == "generator_call started (api_key=*** reading_count=2)"
        assert messages[1].startswith("generator_call completed in ")
        assert caplog.records[1].context == {"reading_count": 2, "api_key": "***"}
        assert "sk-secret" not in caplog.text

    def test_failure_is_logged_and_reraised(self, caplog):
        with caplog.at_level(logging.INFO, logger="tests.logging_utils"):
            with pytest.raises(TimeoutError):
                with log_operation("generator_call", {"model_id": "m"}, test_logger):
                    raise TimeoutError("took too long")

        failure = caplog.records[-1]
        assert failure.levelno == logging.ERROR
        assert failure.error_type == "TimeoutError"
        assert "TimeoutError: took too long" in failure.getMessage()


def test_log_with_context_level_and_suffix(caplog):
    with caplog.at_level(logging.DEBUG, logger="tests.logging_utils"):
        log_with_context("warning", "Standardized 1 readings, skipped 2", {"skipped": ["a", "b"]}, test_logger)
        log_with_context("nonsense", "no context", {}, test_logger)

    assert caplog.records[0].levelno == logging.WARNING
    assert caplog.records[0].getMessage() == "Standardized 1 readings, skipped 2 (skipped=['a', 'b'])"
    assert caplog.records[1].levelno == logging.INFO
    assert caplog.records[1].getMessage() == "no context"


def test_operation_logger_prefixes_request_id(caplog):
    op_logger = create_operation_logger("ab12cd34", test_logger)
    with caplog.at_level(logging.INFO, logger="tests.logging_utils"):
        op_logger.info("Diagnostic complete")

    assert caplog.records[0].getMessage() == "[ab12cd34] Diagnostic complete"
    assert caplog.records[0].operation_id == "ab12cd34"
