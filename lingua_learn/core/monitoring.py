"""
Monitoring and Tracing Module.

Optional Pydantic Logfire integration for the Lingua Learn API. When
``LOGFIRE_ENABLED`` is set and a ``LOGFIRE_TOKEN`` is available, the service
ships traces for its HTTP endpoints, SQL statements and outbound HTTPX calls
(Google OAuth), plus structured events for content authoring and learner
attempts.

The ``log_*`` event helpers are best effort. When Logfire is unconfigured or
fails, they fall back to a debug line on the standard logger and never raise
into the request that emitted them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")


def _flag(environ: Mapping[str, str], name: str, default: str) -> bool:
    return environ.get(name, default).lower() in _TRUTHY


@dataclass(frozen=True)
class MonitoringOptions:
    enabled: bool = False
    token: str = ""
    project_name: str = "lingua-learn"
    environment: str = "development"
    service_name: str = "lingua-learn-api"
    service_version: str = "1.0.0"
    head_sample_rate: float = 1.0
    tail_sample_rate: float = 1.0
    trace_sqlalchemy: bool = True
    trace_httpx: bool = True
    trace_fastapi: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MonitoringOptions":
        """Read the ``LOGFIRE_*`` variables from ``environ`` (default: the process environment)."""
        env = os.environ if environ is None else environ
        return cls(
            enabled=_flag(env, "LOGFIRE_ENABLED", "false"),
            token=env.get("LOGFIRE_TOKEN", ""),
            project_name=env.get("LOGFIRE_PROJECT_NAME", cls.project_name),
            environment=env.get("LOGFIRE_ENVIRONMENT", cls.environment),
            service_name=env.get("LOGFIRE_SERVICE_NAME", cls.service_name),
            service_version=env.get("LOGFIRE_SERVICE_VERSION", cls.service_version),
            head_sample_rate=float(env.get("LOGFIRE_SAMPLE_RATE", "1.0")),
            tail_sample_rate=float(env.get("LOGFIRE_TRACE_SAMPLE_RATE", "1.0")),
            trace_sqlalchemy=_flag(env, "LOGFIRE_TRACE_SQLALCHEMY", "true"),
            trace_httpx=_flag(env, "LOGFIRE_TRACE_HTTPX", "true"),
            trace_fastapi=_flag(env, "LOGFIRE_TRACE_FASTAPI", "true"),
        )


def _instrumentations(options: MonitoringOptions, app: Optional[FastAPI]) -> List[tuple[str, Callable[[], Any]]]:
    steps: List[tuple[str, Callable[[], Any]]] = []
    if options.trace_sqlalchemy:
        steps.append(("SQLAlchemy", logfire.instrument_sqlalchemy))
    if options.trace_httpx:
        steps.append(("HTTPX", logfire.instrument_httpx))
    if options.trace_fastapi:
        if app is not None:
            steps.append(("FastAPI", lambda: logfire.instrument_fastapi(app=app)))
        else:
            logger.debug("FastAPI app instance not provided, skipping FastAPI instrumentation")
    return steps


def initialize_logfire(app: FastAPI | None = None, options: Optional[MonitoringOptions] = None) -> bool:
    """
    Configure Logfire and instrument the libraries enabled in ``options``.

    Args:
        app: Application to instrument; FastAPI tracing is skipped without it.
        options: Monitoring options, read from the environment when omitted.

    Returns:
        ``True`` when Logfire was configured.
    """
    options = options or MonitoringOptions.from_env()
    if not options.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False
    if not options.token:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set; monitoring stays off.")
        return False

    try:
        logfire.configure(
            token=options.token,
            service_name=options.service_name,
            service_version=options.service_version,
            environment=options.environment,
            sampling=logfire.SamplingOptions(head=options.head_sample_rate, tail=options.tail_sample_rate),
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    for name, instrument in _instrumentations(options, app):
        try:
            instrument()
            logger.info(f"Logfire: {name} instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")

    logger.info(
        f"Logfire monitoring initialized: project={options.project_name}, "
        f"environment={options.environment}, service={options.service_name}"
    )
    return True


def _emit(level: str, message: str, fallback: str, attributes: Dict[str, Any]) -> None:
    try:
        getattr(logfire, level)(message, **attributes)
    except Exception:
        logger.debug(f"Could not send to Logfire: {fallback}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """Record a completed API request with its latency."""
    _emit(
        "info",
        "API request completed",
        f"{method} {path}",
        {"method": method, "path": path, "status_code": status_code, "duration_ms": duration_ms},
    )


def log_content_change(action: str, area: str, entity_id: Optional[int], user_id: Optional[int] = None) -> None:
    """
    Record an authoring change to the content tree.

    Args:
        action: Audit action (created, updated, deleted, ...)
        area: Content area (learning_path, unit, lesson, ...)
        entity_id: Primary key of the changed row
        user_id: Acting user, if any
    """
    _emit(
        "info",
        "Content changed",
        f"{action} {area}#{entity_id}",
        {"action": action, "area": area, "entity_id": entity_id, "user_id": user_id},
    )


def log_attempt(kind: str, target_id: int, user_id: int, correct: bool, score: Optional[float] = None) -> None:
    """Record a learner attempt; ``kind`` is ``exercise`` or ``quiz``."""
    _emit(
        "info",
        "Learner attempt recorded",
        f"{kind}#{target_id}",
        {"kind": kind, "target_id": target_id, "user_id": user_id, "correct": correct, "score": score},
    )


def log_error(error_type: str, error_message: str, context: Optional[dict[str, Any]] = None) -> None:
    _emit("error", f"{error_type}: {error_message}", error_type, dict(context or {}))
