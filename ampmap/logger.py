"""Unified logger providing technical instrumentation and activity logging."""

from __future__ import annotations

import hashlib
import json
import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Tuple

import logfire
from ampmap.constants import (
    ACTIVITY_LOG_BACKUP_COUNT,
    ACTIVITY_LOG_FILE_NAME,
    ACTIVITY_LOG_MAX_BYTES,
)
from ampmap.runtime.paths import get_system_root
from ampmap.settings import SettingsError, get_app_settings
from ampmap.settings.store import get_general_settings


_activity_logger: Optional[logging.Logger] = None
_activity_log_path: Optional[Path] = None
_activity_logger_lock = Lock()
_logfire_config_state: Optional[Tuple[bool, Optional[str]]] = None
_logfire_instrumented = False
_logger_internal = logging.getLogger(__name__)


def _token_fingerprint(token: Optional[str]) -> Optional[str]:
    """Create a stable fingerprint for token comparison without storing raw values."""
    if not token:
        return None
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_logfire_configuration(force: bool = False) -> None:
    """
    Reconfigure the global Logfire client based on current settings.

    Args:
        force: When True, always reapply configuration even if nothing changed.
    """
    global _logfire_config_state

    try:
        entry = get_general_settings().get("logfire")
        enabled = bool(entry and getattr(entry, "value", False))
    except (SettingsError, OSError) as exc:
        _logger_internal.error("Failed to read logfire setting, defaulting to disabled: %s", exc)
        enabled = False

    token = get_app_settings().logfire_token
    desired_state = (enabled, _token_fingerprint(token))

    if not force and _logfire_config_state == desired_state:
        return

    send_option: str | bool = "if-token-present" if enabled else False

    logfire.configure(
        send_to_logfire=send_option,
        token=token if enabled else None,
        scrubbing=False,
    )

    _logfire_config_state = desired_state


def _resolve_activity_log_path() -> Path:
    """Activity log lives beside settings.yaml under the active system root."""
    return get_system_root() / ACTIVITY_LOG_FILE_NAME


def _ensure_activity_logger() -> logging.Logger:
    """Create or return the process-wide activity logger."""

    global _activity_logger
    global _activity_log_path

    desired_path = _resolve_activity_log_path()

    if _activity_logger and _activity_log_path == desired_path:
        return _activity_logger

    with _activity_logger_lock:
        if _activity_logger and _activity_log_path == desired_path:
            return _activity_logger

        logger = logging.getLogger("ampmap.activity")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        # Root moved (new runtime or test run): swap the file handler
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        desired_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            desired_path,
            maxBytes=ACTIVITY_LOG_MAX_BYTES,
            backupCount=ACTIVITY_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

        _activity_logger = logger
        _activity_log_path = desired_path
        return logger


class UnifiedLogger:
    """Unified logger providing instrumentation and persistent activity logging."""

    def __init__(self, tag: str):
        """
        Initialize unified logger for a module or component.

        Args:
            tag: Module or component identifier
        """
        self.tag = tag
        self._logfire_instance = None  # Lazy initialization

    @property
    def _logfire(self):
        """Lazy-loaded Logfire instance."""
        if self._logfire_instance is None:
            self._logfire_instance = self._setup_logfire()
        return self._logfire_instance

    def _setup_logfire(self):
        """Set up Logfire client on first use."""
        global _logfire_instrumented
        refresh_logfire_configuration()
        if not _logfire_instrumented:
            logfire.instrument_pydantic()
            _logfire_instrumented = True
        return logfire

    # Technical Instrumentation Methods

    def info(self, message: str, **extra: Any) -> None:
        """Technical info logging."""
        self._logfire.info(message, tag=self.tag, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        """Technical warning logging."""
        self._logfire.warning(message, tag=self.tag, **extra)

    def error(self, message: str, **extra: Any) -> None:
        """Technical error logging."""
        self._logfire.error(message, tag=self.tag, **extra)

    def debug(self, message: str, **extra: Any) -> None:
        """Technical debug logging."""
        self._logfire.debug(message, tag=self.tag, **extra)

    @contextmanager
    def span(self, operation: str, **span_data: Any):
        """
        Manual instrumentation span for critical code paths.

        Usage:
            with logger.span("migrate_mappings", count=len(mappings)):
                ...
        """
        with self._logfire.span(f"{self.tag}:{operation}", **span_data):
            yield

    @asynccontextmanager
    async def async_span(self, operation: str, **span_data: Any):
        """
        Async manual instrumentation span.

        Usage:
            async with logger.async_span("persist", role_id=role_id):
                await persist(snapshot)
        """
        with self._logfire.span(f"{self.tag}:{operation}", **span_data):
            yield

    def trace(self, func_name_template: Optional[str] = None):
        """
        Decorator for function instrumentation with sensible defaults.

        Args:
            func_name_template: Optional template for span name (e.g., "Resolve {model=}")
        """
        def decorator(func):
            span_name = func_name_template or f"{self.tag}:{func.__name__}"
            return self._logfire.instrument(
                span_name,
                extract_args=True,
                record_return=True
            )(func)
        return decorator

    # Activity Logging

    def activity(
        self,
        message: str,
        *,
        level: str = "info",
        metadata: Optional[Dict[str, Any]] = None,
        **context: Any,
    ) -> None:
        """Record an operational activity entry and mirror it to Logfire.

        Args:
            message: Human-readable description of the activity.
            level: Activity level; used for Logfire mirroring and stored payload.
            metadata: Optional structured payload persisted alongside the message.
            **context: Additional identifiers (role_id, source_model, ...) persisted as-is.
        """
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": level,
            "tag": self.tag,
            "message": message,
        }

        if metadata:
            payload["metadata"] = metadata

        if context:
            payload["context"] = context

        _ensure_activity_logger().info(json.dumps(payload, ensure_ascii=False, default=str))

        log_method = getattr(self._logfire, level, None)
        if callable(log_method):
            log_method(message, tag=self.tag, metadata=metadata, **context)
        else:
            self._logfire.info(message, tag=self.tag, metadata=metadata, level=level, **context)

    # Instrumentation Setup

    def setup_instrumentation(self, app=None) -> None:
        """
        Set up FastAPI request instrumentation.

        Args:
            app: Optional FastAPI app instance for request instrumentation
        """
        try:
            if app:
                logfire.instrument_fastapi(app)
        except ImportError as e:
            self.warning(f"Optional instrumentation dependency unavailable: {e}")
        except Exception as e:
            self.error(f"Failed to set up instrumentation: {e}")
            raise


def activity_log_path() -> Path:
    """Path of the activity log for the active system root."""
    return _resolve_activity_log_path()


def reset_activity_logger() -> None:
    """Close the activity log handler so the next entry reopens it."""
    global _activity_logger
    global _activity_log_path

    with _activity_logger_lock:
        if _activity_logger:
            for handler in list(_activity_logger.handlers):
                _activity_logger.removeHandler(handler)
                handler.close()
        _activity_logger = None
        _activity_log_path = None
