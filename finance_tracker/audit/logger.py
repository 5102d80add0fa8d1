"""
Audit Logger

DESIGN DECISION: Every balance-affecting action in the ledger is logged.
This provides:
1. Complete traceability of where the money went
2. Debugging capability
3. User can see history of their interactions

The audit logger:
- Records synchronously, because the ledger itself is synchronous
- Persists asynchronously via flush(), so slow storage never blocks an operation
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finance_tracker.services.storage import AuditStorageInterface


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

# Oldest unflushed events are dropped beyond this
MAX_PENDING_EVENTS = 1000


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. A storage backend, on flush (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        max_pending: int = MAX_PENDING_EVENTS,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            max_pending: Queue size above which the oldest unflushed
                    event is dropped (it has already been logged locally).
        """
        self._storage = storage
        self._max_pending = max_pending
        self._pending: list[AuditEvent] = []
        self._logger = structlog.get_logger()

    @property
    def pending(self) -> list[AuditEvent]:
        """Events recorded but not yet persisted."""
        return list(self._pending)

    def record(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Always logs locally. Queues for persistence if storage is configured.
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            self._pending.append(event)
            if len(self._pending) > self._max_pending:
                dropped = self._pending.pop(0)
                self._logger.warning(
                    "audit_event_dropped",
                    event_id=str(dropped.event_id),
                    max_pending=self._max_pending,
                )

    async def flush(self) -> int:
        """
        Persist queued events in order.

        Stops at the first failure; that event and everything after it
        stay queued for the next flush.

        Returns the number of events persisted.
        """
        if not self._storage:
            return 0

        written = 0
        while self._pending:
            event = self._pending[0]
            try:
                ok = await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                break

            if not ok:
                self._logger.error(
                    "audit_storage_failed",
                    error="storage refused the event",
                    event_id=str(event.event_id),
                )
                break

            self._pending.pop(0)
            written += 1

        return written

    def record_rejection(
        self,
        operation: str,
        reason: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an operation the ledger refused."""
        self.record(AuditEventBuilder.operation_rejected(
            operation=operation,
            reason=reason,
            details=details,
        ))

    def record_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.record(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step action (e.g., moving money into
    a savings goal) and pass it to every event the action produces.
    """
    return uuid4()
