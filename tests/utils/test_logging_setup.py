import json
import logging

from structlog.testing import capture_logs

from http_api_problem import ProblemDetails
from http_api_problem.config import LoggingSettings
from http_api_problem.utils.logging import JsonFormatter, configure_logging, get_logger, scrub


def test_configure_logging_sets_level():
    configure_logging(level="debug")
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_level_name_falls_back_to_info():
    configure_logging(level="chatty")
    assert logging.getLogger().level == logging.INFO


def test_get_logger_returns_a_structlog_logger():
    with capture_logs() as logs:
        get_logger("orders").info("order.created", order_id=17)
    assert logs == [{"event": "order.created", "order_id": 17, "log_level": "info"}]


def test_scrub_masks_nested_keys_case_insensitively():
    value = {"Token": "secret", "items": [{"password": "x", "ok": 1}], "detail": "fine"}
    assert scrub(value, frozenset({"token", "password"})) == {
        "Token": "***",
        "items": [{"password": "***", "ok": 1}],
        "detail": "fine",
    }


def test_json_formatter_scrubs_sensitive_fields():
    formatter = JsonFormatter(scrub_fields=["token"])
    record = logging.LogRecord("problem", logging.INFO, __file__, 1, "processed", None, None)
    record.token = "super-secret"
    record.payload = {"Token": "nested-secret", "detail": "ok"}

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "processed"
    assert payload["token"] == "***"
    assert payload["payload"] == {"Token": "***", "detail": "ok"}


def test_structlog_events_render_as_scrubbed_json(capsys):
    configure_logging(settings=LoggingSettings(level="INFO", scrub_fields=["key"]))
    ProblemDetails.new(404).set_extension("status", 500)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "problem.extension.reserved"
    assert event["level"] == "warning"
    assert event["key"] == "***"


def test_structlog_scrubs_problem_extensions_nested_in_events(capsys):
    configure_logging(settings=LoggingSettings(level="INFO", scrub_fields=["token"]))
    problem = ProblemDetails.new(401).set_extension("token", "abc123")

    get_logger("gateway").error("problem.response", problem=problem.to_dict())

    event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert event["problem"] == {"type": "about:blank", "status": 401, "token": "***"}
