"""
Core Data Models for Finance Tracker

These models define the schemas for everything the ledger holds:
expenses, savings goals, ledger transactions and the aggregate
financial state, plus the result records produced by the calculations.

DESIGN DECISION: Stored entities (Expense, SavingsGoal, Transaction) carry
strict field constraints. The *Input shapes are deliberately loose: they
carry whatever the user typed, and the validation module reports what is
wrong with them instead of pydantic rejecting them outright.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# Length limits shared by the models and the input validators
MAX_CATEGORY_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_GOAL_NAME_LENGTH = 200


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a ledger entry relative to the spendable balance."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class LedgerCategory(str, Enum):
    """
    Categories the ledger assigns on its own.

    User expenses carry free-text categories; these are only used for
    entries the system generates (balance top-ups, goal movements).
    """
    INCOME = "Income"
    SAVINGS = "Savings"
    SAVINGS_WITHDRAWAL = "Savings Withdrawal"
    GOAL_CANCELLATION = "Savings Goal Cancellation"


class AnalysisPeriod(str, Enum):
    """Rolling windows for expense analysis."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def days(self) -> int:
        return {"weekly": 7, "monthly": 30, "yearly": 365}[self.value]


class BudgetPeriod(str, Enum):
    """Reset period of a category budget."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SeenDataType(str, Enum):
    """Sections of the app whose data the user has already looked at."""
    EXPENSES = "expenses"
    SAVINGS = "savings"
    TRANSACTIONS = "transactions"
    DASHBOARD = "dashboard"


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Expense(BaseModel):
    """A dated, categorized debit against the user's balance."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount debited from the balance"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=MAX_CATEGORY_LENGTH,
    )
    description: str = Field(
        default="",
        max_length=MAX_DESCRIPTION_LENGTH,
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the money was spent"
    )


class ExpenseInput(BaseModel):
    """
    Data for a new expense, as entered.

    No id (assigned on creation) and an optional date (defaults to now).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal
    category: str = ""
    description: str = ""
    date: Optional[datetime] = None


class SavingsGoal(BaseModel):
    """A named target amount with a running current amount."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_GOAL_NAME_LENGTH,
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount the user wants to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Amount saved so far"
    )
    category: Optional[str] = None
    color: Optional[str] = None
    target_date: Optional[date] = None
    created_at: datetime = Field(
        default_factory=datetime.now
    )
    deduct_from_balance: bool = Field(
        default=False,
        description="Whether the initial amount was taken from the balance"
    )


class SavingsGoalInput(BaseModel):
    """Data for a new savings goal, as entered."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    category: Optional[str] = None
    color: Optional[str] = None
    target_date: Optional[date] = None
    deduct_from_balance: bool = False


class SavingsGoalUpdate(BaseModel):
    """
    Partial update for a savings goal.

    Only the fields explicitly set are applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    target_amount: Optional[Decimal] = None
    current_amount: Optional[Decimal] = None
    category: Optional[str] = None
    color: Optional[str] = None
    target_date: Optional[date] = None
    deduct_from_balance: Optional[bool] = None


class Transaction(BaseModel):
    """
    A ledger entry produced as a side effect of a balance-affecting operation.

    The amount is always stored as an absolute value; the type carries
    the direction.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
    )
    type: TransactionType
    category: str
    description: str = ""
    date: datetime = Field(
        default_factory=datetime.now
    )
    related_goal_id: Optional[UUID] = Field(
        default=None,
        description="Savings goal this entry moved money to or from"
    )


class FinancialState(BaseModel):
    """Aggregate balance figures held by the finance manager."""

    current_balance: Decimal = Field(default=Decimal("0"), decimal_places=2)
    total_expenses: Decimal = Field(default=Decimal("0"), decimal_places=2)
    total_savings: Decimal = Field(default=Decimal("0"), decimal_places=2)
    last_updated: datetime = Field(
        default_factory=datetime.now
    )


class Budget(BaseModel):
    """Spending limit for a category over a period."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    category: str = Field(..., min_length=1)
    limit: Decimal = Field(..., decimal_places=2)
    current_amount: Decimal = Field(default=Decimal("0"), decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: date = Field(default_factory=date.today)


# =============================================================================
# USER PROFILE (onboarding)
# =============================================================================

class SeenDataFlags(BaseModel):
    """Which sections the user has already been shown data in."""

    expenses: bool = False
    savings: bool = False
    transactions: bool = False
    dashboard: bool = False


class UserProfile(BaseModel):
    """Data collected during onboarding."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=1, le=120)
    monthly_income: Decimal = Field(..., gt=0, decimal_places=2)
    income_day: int = Field(
        ...,
        ge=1,
        le=31,
        description="Day of the month the income arrives"
    )
    is_onboarding_completed: bool = False
    has_seen_data: SeenDataFlags = Field(default_factory=SeenDataFlags)

    @model_validator(mode='before')
    @classmethod
    def default_seen_flags(cls, data):
        """Profiles saved before the seen flags existed load with all flags off."""
        if isinstance(data, dict) and data.get("has_seen_data") is None:
            data = {**data, "has_seen_data": SeenDataFlags()}
        return data


# =============================================================================
# RESULT RECORDS
# =============================================================================

class ValidationResult(BaseModel):
    """Outcome of a validation rule: valid, or the first error found."""

    is_valid: bool
    error_message: Optional[str] = None

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, error_message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=error_message)


class CategoryAmount(BaseModel):
    """Total spent in one category."""

    category: str
    amount: Decimal


class GoalProgress(BaseModel):
    """Progress percentage of one goal."""

    goal_id: UUID
    progress: float


class FinancialSummary(BaseModel):
    """Headline figures for the dashboard."""

    balance: Decimal
    total_expenses: Decimal
    total_savings: Decimal
    savings_percentage: float
    goal_count: int


class SavingsSuggestion(BaseModel):
    """A suggested recurring saving amount."""

    name: str
    amount: Decimal
    period: str = "monthly"


class BudgetOverview(BaseModel):
    """
    Monthly income against this month's spending.

    Uses a fixed 30-day month for the month-end projection.
    """

    monthly_income: Decimal
    expenses_this_month: Decimal
    remaining_budget: Decimal
    budget_usage_ratio: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Share of the income already spent (capped at 1)"
    )
    daily_expense: Decimal
    remaining_days: int
    estimated_end_of_month_balance: Decimal
