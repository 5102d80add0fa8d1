"""
Audit Models for Finance Tracker

Every operation that moves money (or rewrites the financial state) is
recorded as an audit event. This provides:
1. Traceability of every balance change
2. Debugging information when an operation is refused
3. A history that survives undo (undo is itself an event)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"

    # Balance
    BALANCE_ADJUSTED = "balance_adjusted"
    TRANSACTION_HANDLED = "transaction_handled"
    TRANSACTION_UNDONE = "transaction_undone"
    FINANCIAL_STATE_OVERWRITTEN = "financial_state_overwritten"

    # Savings goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_REMOVED = "goal_removed"
    GOAL_FUNDS_ADDED = "goal_funds_added"
    GOAL_FUNDS_WITHDRAWN = "goal_funds_withdrawn"

    # Profile
    PROFILE_SAVED = "profile_saved"
    ONBOARDING_COMPLETED = "onboarding_completed"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every balance-affecting operation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'goal', 'transaction')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., both legs of a goal deposit)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=True,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, category)
        event = AuditEventBuilder.transaction_undone(transaction_id, amount, "expense")
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        amount: Decimal,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {category} - {_money(amount)}",
            details={
                "amount": _money(amount),
                "category": category,
            },
        )

    @staticmethod
    def expense_removed(
        expense_id: UUID,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense removed, {_money(amount)} returned to balance",
            details={"amount": _money(amount)},
        )

    @staticmethod
    def balance_adjusted(
        transaction_id: UUID,
        amount: Decimal,
        new_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_ADJUSTED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Balance adjusted by {_money(amount)}",
            details={
                "amount": _money(amount),
                "new_balance": _money(new_balance),
            },
        )

    @staticmethod
    def transaction_handled(
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_HANDLED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"External {transaction_type} transaction recorded: {_money(amount)}",
            details={
                "type": transaction_type,
                "amount": _money(amount),
            },
        )

    @staticmethod
    def transaction_undone(
        transaction_id: UUID,
        amount: Decimal,
        transaction_type: str,
        related_goal_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UNDONE,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Undid {transaction_type} transaction of {_money(amount)}",
            details={
                "type": transaction_type,
                "amount": _money(amount),
                "related_goal_id": str(related_goal_id) if related_goal_id else None,
            },
        )

    @staticmethod
    def financial_state_overwritten(
        previous_balance: Decimal,
        new_balance: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINANCIAL_STATE_OVERWRITTEN,
            severity=AuditSeverity.WARNING,
            entity_type="financial_state",
            description="Financial state overwritten",
            details={
                "previous_balance": _money(previous_balance),
                "new_balance": _money(new_balance),
            },
        )

    @staticmethod
    def goal_created(
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
        initial_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal created: {name}",
            details={
                "target_amount": _money(target_amount),
                "initial_amount": _money(initial_amount),
            },
        )

    @staticmethod
    def goal_updated(
        goal_id: UUID,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
        )

    @staticmethod
    def goal_removed(
        goal_id: UUID,
        name: str,
        returned_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_REMOVED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal removed: {name}",
            details={"returned_amount": _money(returned_amount)},
        )

    @staticmethod
    def goal_funds_moved(
        goal_id: UUID,
        amount: Decimal,
        deposit: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.GOAL_FUNDS_ADDED
                if deposit
                else AuditEventType.GOAL_FUNDS_WITHDRAWN
            ),
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=(
                f"{_money(amount)} {'added to' if deposit else 'withdrawn from'} savings goal"
            ),
            details={"amount": _money(amount)},
        )

    @staticmethod
    def profile_saved(name: str, onboarding_completed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.ONBOARDING_COMPLETED
                if onboarding_completed
                else AuditEventType.PROFILE_SAVED
            ),
            entity_type="profile",
            description=f"Profile saved for {name}",
            details={"onboarding_completed": onboarding_completed},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        reason: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"{operation} rejected",
            error_message=reason,
            details={"operation": operation, **(details or {})},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
            is_user_action=False,
        )
