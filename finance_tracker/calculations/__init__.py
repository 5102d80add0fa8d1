"""Calculation package."""

from finance_tracker.calculations.service import CalculationService, calculation_service
from finance_tracker.calculations.utils import (
    calculate_budget_overview,
    calculate_budget_usage,
    calculate_category_percentages,
    calculate_daily_amount,
    calculate_estimated_time_to_reach_goal,
    calculate_financial_summary,
    calculate_goal_progress,
    calculate_month_expenses,
    calculate_overall_progress,
    calculate_remaining_amount,
    calculate_remaining_days,
    filter_expenses_by_date_range,
    format_currency,
    format_date,
    generate_savings_suggestions,
    get_expense_analysis_by_period,
    get_top_expense_categories,
    group_expenses_by_category,
    validate_transaction_date,
)

__all__ = [
    "CalculationService",
    "calculation_service",
    "calculate_budget_overview",
    "calculate_budget_usage",
    "calculate_category_percentages",
    "calculate_daily_amount",
    "calculate_estimated_time_to_reach_goal",
    "calculate_financial_summary",
    "calculate_goal_progress",
    "calculate_month_expenses",
    "calculate_overall_progress",
    "calculate_remaining_amount",
    "calculate_remaining_days",
    "filter_expenses_by_date_range",
    "format_currency",
    "format_date",
    "generate_savings_suggestions",
    "get_expense_analysis_by_period",
    "get_top_expense_categories",
    "group_expenses_by_category",
    "validate_transaction_date",
]
