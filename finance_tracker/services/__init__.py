"""Services package."""

from finance_tracker.services.errors import (
    ExpenseNotFoundError,
    FinanceError,
    GoalNotFoundError,
    InsufficientBalanceError,
    InsufficientGoalFundsError,
    InvalidTransactionDateError,
    TransactionNotFoundError,
    ValidationFailedError,
)
from finance_tracker.services.expense_service import ExpenseService
from finance_tracker.services.savings_service import SavingsService
from finance_tracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    JsonFileProfileStorage,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
)

__all__ = [
    # Ledger errors
    "ExpenseNotFoundError",
    "FinanceError",
    "GoalNotFoundError",
    "InsufficientBalanceError",
    "InsufficientGoalFundsError",
    "InvalidTransactionDateError",
    "TransactionNotFoundError",
    "ValidationFailedError",
    # Ledger services
    "ExpenseService",
    "SavingsService",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStorage",
    "InMemoryAuditStorage",
    "InMemoryProfileStorage",
    "JsonFileProfileStorage",
    "NotFoundError",
    "ProfileStorageInterface",
    "StorageError",
]
