"""Tests for logging configuration."""

import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def make_record(msg, args=None):
    return logging.LogRecord("fragments", logging.INFO, __file__, 1, msg, args, None)


class TestSensitiveDataFilter:
    """Test credential masking in log records."""

    def test_masks_basic_credentials(self):
        record = make_record("Authorization: Basic dXNlcjpwYXNz")
        SensitiveDataFilter().filter(record)

        assert "dXNlcjpwYXNz" not in record.msg
        assert "***MASKED***" in record.msg

    def test_masks_password_fields(self):
        record = make_record('payload {"password": "hunter2"}')
        SensitiveDataFilter().filter(record)

        assert "hunter2" not in record.msg

    def test_masks_format_arguments(self):
        record = make_record("secret %s", ("aws_secret_access_key=abc123",))
        SensitiveDataFilter().filter(record)

        assert "abc123" not in record.getMessage()

    def test_leaves_other_messages_alone(self):
        record = make_record("Fragment created [fragment_id=abc]")
        assert SensitiveDataFilter().filter(record) is True
        assert record.msg == "Fragment created [fragment_id=abc]"


class TestSetupLogging:
    def test_installs_one_handler(self):
        logger = setup_logging("fragments-test-component", "DEBUG")
        setup_logging("fragments-test-component", "DEBUG")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert any(isinstance(f, SensitiveDataFilter) for f in logger.handlers[0].filters)

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("fragments-test-level", "LOUD")
        assert logger.level == logging.INFO
