"""
Ledger Input Validation

DESIGN DECISION: Validation rules are small functions that each return a
ValidationResult instead of raising. Composite validators run their rules
in a fixed order and stop at the first failure, so the user always sees
the single most relevant problem.

IMPORTANT: Validation NEVER silently fixes values.
It reports them; the caller decides what to do.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from finance_tracker.models.finance import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_GOAL_NAME_LENGTH,
    ExpenseInput,
    SavingsGoalInput,
    ValidationResult,
)

Number = Union[Decimal, int, float]

CENT = Decimal("0.01")


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _format_amount(value: Number) -> str:
    return f"{Decimal(str(value)):.2f}"


def _has_cents_precision(value: Number) -> bool:
    amount = Decimal(str(value))
    return amount == amount.quantize(CENT)


# =============================================================================
# SINGLE-VALUE RULES
# =============================================================================

def validate_positive_number(value: Number, field_name: str) -> ValidationResult:
    """Value must be strictly greater than zero, in whole cents."""
    if value <= 0:
        return ValidationResult.invalid(f"{field_name} must be greater than zero")
    if not _has_cents_precision(value):
        return ValidationResult.invalid(f"{field_name} cannot have more than two decimal places")
    return ValidationResult.valid()


def validate_sufficient_balance(amount: Number, current_balance: Number) -> ValidationResult:
    """The balance must cover the amount."""
    if current_balance < amount:
        return ValidationResult.invalid(
            f"Insufficient balance. Current balance: {_format_amount(current_balance)}"
        )
    return ValidationResult.valid()


def validate_non_zero(value: Number, field_name: str) -> ValidationResult:
    """Guards divisions."""
    if value == 0:
        return ValidationResult.invalid(f"{field_name} cannot be zero")
    return ValidationResult.valid()


def validate_date(value: Any, field_name: str) -> ValidationResult:
    """Value must be present and be a date."""
    if value is None:
        return ValidationResult.invalid(f"{field_name} must be a valid date")
    if not isinstance(value, (date, datetime)):
        return ValidationResult.invalid(f"{field_name} must be in a valid date format")
    return ValidationResult.valid()


def validate_future_date(
    value: Any,
    field_name: str,
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Value must be a valid date strictly after today.

    Compared at day granularity: today itself is not in the future.
    """
    result = validate_date(value, field_name)
    if not result.is_valid:
        return result

    today = today or date.today()
    if _as_date(value) <= today:
        return ValidationResult.invalid(f"{field_name} must be a date in the future")
    return ValidationResult.valid()


def validate_required_field(value: Optional[str], field_name: str) -> ValidationResult:
    """String must be present and not blank."""
    if not value or not value.strip():
        return ValidationResult.invalid(f"{field_name} cannot be empty")
    return ValidationResult.valid()


def validate_max_length(value: Optional[str], field_name: str, max_length: int) -> ValidationResult:
    """String, if given, must fit in `max_length` characters once trimmed."""
    if value and len(value.strip()) > max_length:
        return ValidationResult.invalid(
            f"{field_name} cannot be longer than {max_length} characters"
        )
    return ValidationResult.valid()


# =============================================================================
# COMPOSITE RULES
# =============================================================================

def validate_expense(expense_data: ExpenseInput, current_balance: Number) -> ValidationResult:
    """
    Validate a new expense.

    Order: positive amount, sufficient balance, category, lengths,
    date (if given).
    """
    checks = [
        lambda: validate_positive_number(expense_data.amount, "Expense amount"),
        lambda: validate_sufficient_balance(expense_data.amount, current_balance),
        lambda: validate_required_field(expense_data.category, "Category"),
        lambda: validate_max_length(expense_data.category, "Category", MAX_CATEGORY_LENGTH),
        lambda: validate_max_length(
            expense_data.description, "Description", MAX_DESCRIPTION_LENGTH
        ),
    ]
    if expense_data.date is not None:
        checks.append(lambda: validate_date(expense_data.date, "Date"))

    for check in checks:
        result = check()
        if not result.is_valid:
            return result
    return ValidationResult.valid()


def validate_savings_goal(
    goal_data: SavingsGoalInput,
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Validate a new savings goal.

    Order: name, positive target, future target date (if given),
    initial amount not above the target.
    """
    for result in (
        validate_required_field(goal_data.name, "Goal name"),
        validate_max_length(goal_data.name, "Goal name", MAX_GOAL_NAME_LENGTH),
    ):
        if not result.is_valid:
            return result

    result = validate_positive_number(goal_data.target_amount, "Target amount")
    if not result.is_valid:
        return result

    if goal_data.target_date is not None:
        result = validate_future_date(goal_data.target_date, "Target date", today=today)
        if not result.is_valid:
            return result

    if goal_data.current_amount < 0:
        return ValidationResult.invalid("Initial amount cannot be negative")
    if not _has_cents_precision(goal_data.current_amount):
        return ValidationResult.invalid("Initial amount cannot have more than two decimal places")
    if goal_data.current_amount > goal_data.target_amount:
        return ValidationResult.invalid("Initial amount cannot exceed the target amount")

    return ValidationResult.valid()


def validate_add_funds_to_goal(amount: Number, current_balance: Number) -> ValidationResult:
    """Money moved into a goal must be positive and covered by the balance."""
    result = validate_positive_number(amount, "Amount to add")
    if not result.is_valid:
        return result
    return validate_sufficient_balance(amount, current_balance)


def validate_withdraw_funds_from_goal(amount: Number, goal_current_amount: Number) -> ValidationResult:
    """Money taken out of a goal must be positive and held by the goal."""
    result = validate_positive_number(amount, "Amount to withdraw")
    if not result.is_valid:
        return result

    if goal_current_amount < amount:
        return ValidationResult.invalid(
            f"The goal does not hold enough money. Available: {_format_amount(goal_current_amount)}"
        )
    return ValidationResult.valid()


def validate_user_profile(
    name: Optional[str],
    age: Optional[int],
    monthly_income: Optional[Number],
    income_day: Optional[int],
) -> ValidationResult:
    """Onboarding answers: name, age 1-120, positive income, income day 1-31."""
    result = validate_required_field(name, "Name")
    if not result.is_valid:
        return result

    if age is None or not 1 <= age <= 120:
        return ValidationResult.invalid("Please enter a valid age (1-120)")

    if monthly_income is None or monthly_income <= 0:
        return ValidationResult.invalid("Please enter a valid monthly income")

    if income_day is None or not 1 <= income_day <= 31:
        return ValidationResult.invalid("Please enter a valid day (1-31)")

    return ValidationResult.valid()
