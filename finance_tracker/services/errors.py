"""
Ledger Exceptions

Services raise these; the finance manager turns them into a refused
operation (None / False plus `last_error`).
"""

from typing import Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.models.finance import ValidationResult


class FinanceError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationFailedError(FinanceError):
    """Input failed a validation rule."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.error_message or "Validation failed")

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> "ValidationFailedError":
        """Report the first model constraint that failed."""
        first = error.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        return cls(ValidationResult.invalid(f"{field}: {first['msg']}"))


class InsufficientBalanceError(FinanceError):
    """The balance does not cover the amount."""
    pass


class InsufficientGoalFundsError(FinanceError):
    """The savings goal does not hold enough money."""
    pass


class InvalidTransactionDateError(FinanceError):
    """Transaction dated in the future."""
    pass


class _EntityNotFoundError(FinanceError):
    entity = "Entity"

    def __init__(self, entity_id: Optional[UUID] = None):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class GoalNotFoundError(_EntityNotFoundError):
    entity = "Savings goal"


class ExpenseNotFoundError(_EntityNotFoundError):
    entity = "Expense"


class TransactionNotFoundError(_EntityNotFoundError):
    entity = "Transaction"
