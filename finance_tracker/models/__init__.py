"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the ledger must conform to these schemas.
"""

from finance_tracker.models.finance import (
    AnalysisPeriod,
    Budget,
    BudgetOverview,
    BudgetPeriod,
    CategoryAmount,
    Expense,
    ExpenseInput,
    FinancialState,
    FinancialSummary,
    GoalProgress,
    LedgerCategory,
    SavingsGoal,
    SavingsGoalInput,
    SavingsGoalUpdate,
    SavingsSuggestion,
    SeenDataFlags,
    SeenDataType,
    Transaction,
    TransactionType,
    UserProfile,
    ValidationResult,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AnalysisPeriod",
    "Budget",
    "BudgetOverview",
    "BudgetPeriod",
    "CategoryAmount",
    "Expense",
    "ExpenseInput",
    "FinancialState",
    "FinancialSummary",
    "GoalProgress",
    "LedgerCategory",
    "SavingsGoal",
    "SavingsGoalInput",
    "SavingsGoalUpdate",
    "SavingsSuggestion",
    "SeenDataFlags",
    "SeenDataType",
    "Transaction",
    "TransactionType",
    "UserProfile",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
