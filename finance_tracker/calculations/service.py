"""
Calculation Service

Keeps the calculation and validation rules behind one object so the
finance manager (and anything presenting its data) never reaches into
the individual functions directly.

The guards here are slightly stricter than the bare functions:
a missing goal or an unusable contribution yields 0 rather than None.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from finance_tracker.calculations import utils
from finance_tracker.models.finance import (
    AnalysisPeriod,
    CategoryAmount,
    Expense,
    ExpenseInput,
    FinancialState,
    FinancialSummary,
    SavingsGoal,
    SavingsGoalInput,
    ValidationResult,
)
from finance_tracker.validation import validator


class CalculationService:
    """Facade over the validation rules and ledger calculations."""

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_expense_data(
        self,
        expense_data: ExpenseInput,
        current_balance: Decimal,
    ) -> ValidationResult:
        return validator.validate_expense(expense_data, current_balance)

    def validate_savings_goal_data(self, goal_data: SavingsGoalInput) -> ValidationResult:
        return validator.validate_savings_goal(goal_data)

    def validate_add_funds(self, amount: Decimal, current_balance: Decimal) -> ValidationResult:
        return validator.validate_add_funds_to_goal(amount, current_balance)

    def validate_withdraw_funds(
        self,
        amount: Decimal,
        goal_current_amount: Decimal,
    ) -> ValidationResult:
        return validator.validate_withdraw_funds_from_goal(amount, goal_current_amount)

    def validate_positive_value(self, value: Decimal, field_name: str) -> ValidationResult:
        return validator.validate_positive_number(value, field_name)

    def validate_non_zero_value(self, value: Decimal, field_name: str) -> ValidationResult:
        return validator.validate_non_zero(value, field_name)

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def calculate_goal_progress(self, goal: Optional[SavingsGoal]) -> float:
        if goal is None:
            return 0.0
        return utils.calculate_goal_progress(goal)

    def calculate_remaining_amount(self, goal: Optional[SavingsGoal]) -> Decimal:
        if goal is None or goal.target_amount <= 0:
            return utils.ZERO
        return utils.calculate_remaining_amount(goal)

    def calculate_estimated_time(
        self,
        goal: Optional[SavingsGoal],
        monthly_contribution: Decimal,
    ) -> int:
        """Months to reach the goal; 0 when it cannot be estimated or is already reached."""
        if goal is None or goal.target_amount <= 0 or monthly_contribution <= 0:
            return 0

        if goal.current_amount >= goal.target_amount:
            return 0

        return utils.calculate_estimated_time_to_reach_goal(goal, monthly_contribution) or 0

    def calculate_overall_savings_progress(self, savings_goals: Iterable[SavingsGoal]) -> float:
        return utils.calculate_overall_progress(savings_goals)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def get_category_totals(self, expenses: Iterable[Expense]) -> dict[str, Decimal]:
        return utils.group_expenses_by_category(expenses)

    def get_category_percentages(self, expenses: Iterable[Expense]) -> dict[str, float]:
        return utils.calculate_category_percentages(expenses)

    def get_expense_analysis_by_period(
        self,
        expenses: Iterable[Expense],
        period: AnalysisPeriod,
    ) -> dict[str, Decimal]:
        return utils.get_expense_analysis_by_period(expenses, period)

    def get_top_spending_categories(
        self,
        expenses: Iterable[Expense],
        count: int = 5,
    ) -> list[CategoryAmount]:
        return utils.get_top_expense_categories(expenses, count)

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def calculate_financial_summary(
        self,
        financial_state: FinancialState,
        savings_goals: Iterable[SavingsGoal],
    ) -> FinancialSummary:
        return utils.calculate_financial_summary(financial_state, savings_goals)


# Shared instance
calculation_service = CalculationService()
