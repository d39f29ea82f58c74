"""Unit tests for the Logfire monitoring module."""

import logging
from unittest.mock import Mock

import logfire
import pytest
from fastapi import FastAPI

from lingua_learn.core import monitoring
from lingua_learn.core.monitoring import (
    MonitoringOptions,
    initialize_logfire,
    log_api_request,
    log_attempt,
    log_content_change,
    log_error,
)


@pytest.fixture
def fake_logfire(monkeypatch):
    calls = Mock()
    for name in ("configure", "instrument_sqlalchemy", "instrument_httpx", "instrument_fastapi", "info", "error"):
        monkeypatch.setattr(logfire, name, getattr(calls, name))
    return calls


class TestMonitoringOptions:
    def test_defaults_when_environment_is_empty(self):
        options = MonitoringOptions.from_env({})

        assert options == MonitoringOptions()
        assert options.enabled is False
        assert options.service_name == "lingua-learn-api"

    @pytest.mark.parametrize("value", ["true", "1", "YES"])
    def test_enabled_flag(self, value):
        assert MonitoringOptions.from_env({"LOGFIRE_ENABLED": value}).enabled is True

    def test_values_are_read(self):
        options = MonitoringOptions.from_env(
            {
                "LOGFIRE_ENABLED": "true",
                "LOGFIRE_TOKEN": "tok",
                "LOGFIRE_ENVIRONMENT": "production",
                "LOGFIRE_SAMPLE_RATE": "0.25",
                "LOGFIRE_TRACE_HTTPX": "false",
            }
        )

        assert options.token == "tok"
        assert options.environment == "production"
        assert options.head_sample_rate == 0.25
        assert options.trace_httpx is False
        assert options.trace_sqlalchemy is True


class TestInitializeLogfire:
    def test_disabled_skips_configuration(self, fake_logfire, caplog):
        with caplog.at_level(logging.INFO, logger=monitoring.__name__):
            assert initialize_logfire(options=MonitoringOptions(enabled=False)) is False

        fake_logfire.configure.assert_not_called()
        assert "disabled" in caplog.text

    def test_missing_token_warns(self, fake_logfire, caplog):
        with caplog.at_level(logging.WARNING, logger=monitoring.__name__):
            assert initialize_logfire(options=MonitoringOptions(enabled=True)) is False

        fake_logfire.configure.assert_not_called()
        assert "LOGFIRE_TOKEN is not set" in caplog.text

    def test_configures_and_instruments(self, fake_logfire):
        app = FastAPI()
        options = MonitoringOptions(enabled=True, token="tok", environment="staging", head_sample_rate=0.5)

        assert initialize_logfire(app, options) is True

        kwargs = fake_logfire.configure.call_args.kwargs
        assert kwargs["token"] == "tok"
        assert kwargs["environment"] == "staging"
        assert kwargs["sampling"].head == 0.5
        fake_logfire.instrument_sqlalchemy.assert_called_once_with()
        fake_logfire.instrument_httpx.assert_called_once_with()
        fake_logfire.instrument_fastapi.assert_called_once_with(app=app)

    def test_feature_flags_and_missing_app(self, fake_logfire):
        options = MonitoringOptions(enabled=True, token="tok", trace_sqlalchemy=False, trace_httpx=False)

        assert initialize_logfire(None, options) is True

        fake_logfire.instrument_sqlalchemy.assert_not_called()
        fake_logfire.instrument_httpx.assert_not_called()
        fake_logfire.instrument_fastapi.assert_not_called()

    def test_failed_instrumentation_does_not_stop_the_rest(self, fake_logfire, caplog):
        fake_logfire.instrument_sqlalchemy.side_effect = RuntimeError("no engine")

        with caplog.at_level(logging.WARNING, logger=monitoring.__name__):
            assert initialize_logfire(None, MonitoringOptions(enabled=True, token="tok")) is True

        fake_logfire.instrument_httpx.assert_called_once_with()
        assert "Failed to instrument SQLAlchemy: no engine" in caplog.text

    def test_configure_failure_returns_false(self, fake_logfire):
        fake_logfire.configure.side_effect = RuntimeError("bad token")

        assert initialize_logfire(None, MonitoringOptions(enabled=True, token="tok")) is False
        fake_logfire.instrument_httpx.assert_not_called()


class TestEventHelpers:
    def test_api_request(self, fake_logfire):
        log_api_request("GET", "/api/learning-paths", 200, 12.5)

        fake_logfire.info.assert_called_once_with(
            "API request completed", method="GET", path="/api/learning-paths", status_code=200, duration_ms=12.5
        )

    def test_content_change(self, fake_logfire):
        log_content_change("published", "learning_path", 3, user_id=1)

        fake_logfire.info.assert_called_once_with(
            "Content changed", action="published", area="learning_path", entity_id=3, user_id=1
        )

    def test_attempt(self, fake_logfire):
        log_attempt("quiz", 4, 2, True, 80.0)

        fake_logfire.info.assert_called_once_with(
            "Learner attempt recorded", kind="quiz", target_id=4, user_id=2, correct=True, score=80.0
        )

    def test_error_with_context(self, fake_logfire):
        log_error("ValueError", "boom", {"path": "/api/units"})

        fake_logfire.error.assert_called_once_with("ValueError: boom", path="/api/units")

    def test_error_without_context(self, fake_logfire):
        log_error("KeyError", "missing")

        fake_logfire.error.assert_called_once_with("KeyError: missing")

    def test_helpers_never_raise(self, fake_logfire, caplog):
        fake_logfire.info.side_effect = RuntimeError("exporter down")
        fake_logfire.error.side_effect = RuntimeError("exporter down")

        with caplog.at_level(logging.DEBUG, logger=monitoring.__name__):
            log_api_request("POST", "/api/auth/login", 401, 3.0)
            log_content_change("deleted", "unit", 9)
            log_attempt("exercise", 1, 1, False)
            log_error("RuntimeError", "oops")

        assert "Could not send to Logfire: deleted unit#9" in caplog.text
