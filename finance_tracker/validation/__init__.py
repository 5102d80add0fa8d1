"""Validation package."""

from finance_tracker.validation.validator import (
    validate_add_funds_to_goal,
    validate_date,
    validate_expense,
    validate_future_date,
    validate_max_length,
    validate_non_zero,
    validate_positive_number,
    validate_required_field,
    validate_savings_goal,
    validate_sufficient_balance,
    validate_user_profile,
    validate_withdraw_funds_from_goal,
)

__all__ = [
    "validate_add_funds_to_goal",
    "validate_date",
    "validate_expense",
    "validate_future_date",
    "validate_max_length",
    "validate_non_zero",
    "validate_positive_number",
    "validate_required_field",
    "validate_savings_goal",
    "validate_sufficient_balance",
    "validate_user_profile",
    "validate_withdraw_funds_from_goal",
]
