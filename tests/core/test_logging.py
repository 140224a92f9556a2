"""Tests for bossdesk.core.logging."""

import json

from bossdesk.core.logging import LogContext, configure_logging, get_logger


class TestConfigureLogging:
    def test_json_to_stderr(self, capsys):
        configure_logging(level="INFO", json_format=True, service="bossdesk-test")
        get_logger("bossdesk.test").info("schema_detected", version=27)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "schema_detected"
        assert record["log.level"] == "info"
        assert record["version"] == 27
        assert record["service.name"] == "bossdesk-test"
        assert record["logger"] == "bossdesk.test"

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("bossdesk.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err

    def test_log_context_scoped(self, capsys):
        configure_logging(level="INFO", json_format=True)
        log = get_logger("bossdesk.test")
        with LogContext(queue="emails"):
            log.info("inside")
        log.info("outside")

        lines = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        assert lines[-2]["queue"] == "emails"
        assert "queue" not in lines[-1]
