"""
Audit Logger

DESIGN DECISION: Every significant session action is logged.
This provides:
1. Traceability of how a split came to be
2. Debugging capability for bad receipt scans
3. A history the user can look back through during the session

The audit logger:
- Writes every event to the structured local log
- Keeps a bounded, append-only in-memory history (nothing is persisted)
- Supports correlation IDs to trace the events of one receipt import
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from easesplit.config import get_settings
from easesplit.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: str):
    """Structured logger for a module, using the configuration above."""
    return structlog.get_logger(name)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output through a stdlib handler at the configured level.

    debug_mode forces DEBUG. Does nothing to an application that already
    configured logging.
    """
    if level is None:
        app_settings = get_settings().app
        level = "DEBUG" if app_settings.debug_mode else app_settings.log_level
    logging.basicConfig(format="%(message)s", level=level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. In-memory history (for the current session only)
    """

    def __init__(self, history_limit: Optional[int] = None):
        """
        Initialize audit logger.

        Args:
            history_limit: Maximum events kept in memory.
                           Defaults to the configured audit_history_limit.
        """
        if history_limit is None:
            history_limit = get_settings().app.audit_history_limit
        self._history: deque[AuditEvent] = deque(maxlen=history_limit)
        self._logger = get_logger("easesplit.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """
        Log an audit event locally and append it to the history.
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        return event

    @property
    def history(self) -> list[AuditEvent]:
        """Events logged so far, oldest first."""
        return list(self._history)

    def events_for(self, correlation_id: UUID) -> list[AuditEvent]:
        """All events sharing one correlation ID."""
        return [e for e in self._history if e.correlation_id == correlation_id]

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., receipt upload).
    Pass it through all subsequent operations.
    """
    return uuid4()
