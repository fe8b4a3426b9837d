"""
Audit Logger

DESIGN DECISION: Every change to expenses or accounts is logged.
This provides:
1. Traceability of every mutation and rejection
2. Debugging capability
3. A visible trail for storage failures

Events are rendered as JSON lines through structlog on top of the
standard logging module.
"""

import logging
import structlog

from finance_tracker.models.audit import AuditEvent, AuditSeverity


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

LOGGER_NAME = "finance_tracker.audit"


def configure_logging(log_level: str = "INFO") -> None:
    """Attach a stream handler and set the audit log level."""
    logging.basicConfig(format="%(message)s", level=log_level)
    logging.getLogger(LOGGER_NAME).setLevel(log_level)


class AuditLogger:
    """
    Central audit logging service.

    Each AuditEvent is written at the level matching its severity.
    """

    def __init__(self, logger_name: str = LOGGER_NAME):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)
