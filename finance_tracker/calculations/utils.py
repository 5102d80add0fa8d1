"""
Ledger Calculations

Pure functions over the ledger models: goal progress, time-to-goal
estimates, category breakdowns and dashboard figures.

Nothing in here touches state. Anything time-dependent takes an optional
`today` / `now` argument so results are reproducible.

Amounts stay Decimal, rounded to whole cents; percentages are floats.
"""

import math
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from finance_tracker.models.finance import (
    AnalysisPeriod,
    Budget,
    BudgetOverview,
    CategoryAmount,
    Expense,
    FinancialState,
    FinancialSummary,
    SavingsGoal,
    SavingsSuggestion,
)

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Fixed month length used by the month-end projection
DAYS_IN_MONTH = 30

SAVINGS_SUGGESTION_RATES = (
    ("Basic Savings", Decimal("0.10")),
    ("Aggressive Savings", Decimal("0.20")),
    ("Mini Savings", Decimal("0.05")),
)


def to_cents(amount: Decimal) -> Decimal:
    """Round half up to two decimal places."""
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def _clamp_percentage(value: float) -> float:
    return min(max(value, 0.0), 100.0)


# =============================================================================
# SAVINGS GOALS
# =============================================================================

def calculate_goal_progress(goal: SavingsGoal) -> float:
    """Progress towards the target, in percent (0-100)."""
    if goal.target_amount <= 0:
        return 0.0
    return _clamp_percentage(float(goal.current_amount / goal.target_amount * 100))


def calculate_remaining_days(
    target_date: Optional[date],
    today: Optional[date] = None,
) -> Optional[int]:
    """
    Whole days left until the target date.

    Returns None when there is no target date (no deadline).
    Past dates count as 0.
    """
    if target_date is None:
        return None

    today = today or date.today()
    if isinstance(target_date, datetime):
        target_date = target_date.date()
    return max((target_date - today).days, 0)


def calculate_remaining_amount(goal: SavingsGoal) -> Decimal:
    """Amount still missing to reach the target."""
    return max(goal.target_amount - goal.current_amount, ZERO)


def calculate_daily_amount(goal: SavingsGoal, today: Optional[date] = None) -> Decimal:
    """
    Daily saving needed to reach the goal by its target date.

    Without a deadline (or with none left) the whole remaining amount is due.
    """
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return ZERO

    remaining_days = calculate_remaining_days(goal.target_date, today=today)
    if not remaining_days:
        return remaining

    return to_cents(remaining / remaining_days)


def calculate_estimated_time_to_reach_goal(
    goal: SavingsGoal,
    monthly_contribution: Decimal,
) -> Optional[int]:
    """
    Months needed at a fixed monthly contribution.

    Returns None when the contribution can never reach the goal
    (zero or negative), and 0 when the goal is already reached.
    """
    if monthly_contribution <= 0:
        return None

    remaining = calculate_remaining_amount(goal)
    if remaining <= 0:
        return 0

    return math.ceil(remaining / Decimal(str(monthly_contribution)))


def calculate_overall_progress(goals: Iterable[SavingsGoal]) -> float:
    """Combined progress of all goals, weighted by their targets."""
    goals = list(goals)
    if not goals:
        return 0.0

    total_target = sum((goal.target_amount for goal in goals), ZERO)
    total_current = sum((goal.current_amount for goal in goals), ZERO)

    if total_target <= 0:
        return 0.0

    return min(float(total_current / total_target * 100), 100.0)


def generate_savings_suggestions(monthly_income: Decimal) -> list[SavingsSuggestion]:
    """Monthly saving amounts at 10 %, 20 % and 5 % of the income."""
    income = Decimal(str(monthly_income))
    return [
        SavingsSuggestion(name=name, amount=to_cents(income * rate), period="monthly")
        for name, rate in SAVINGS_SUGGESTION_RATES
    ]


# =============================================================================
# EXPENSES
# =============================================================================

def group_expenses_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Total spent per category, in order of first appearance.

    Non-positive amounts contribute nothing.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        amount = expense.amount if expense.amount > 0 else ZERO
        totals[expense.category] = totals.get(expense.category, ZERO) + amount
    return totals


def calculate_category_percentages(expenses: Iterable[Expense]) -> dict[str, float]:
    """Each category's share of total spending, in percent."""
    totals = group_expenses_by_category(expenses)
    grand_total = sum(totals.values(), ZERO)

    if grand_total <= 0:
        return {}

    return {
        category: float(amount / grand_total * 100)
        for category, amount in totals.items()
    }


def filter_expenses_by_date_range(
    expenses: Iterable[Expense],
    start: datetime,
    end: datetime,
) -> list[Expense]:
    """Expenses dated within [start, end]."""
    return [expense for expense in expenses if start <= expense.date <= end]


def get_expense_analysis_by_period(
    expenses: Iterable[Expense],
    period: AnalysisPeriod,
    now: Optional[datetime] = None,
) -> dict[str, Decimal]:
    """Category totals over the last 7, 30 or 365 days."""
    period = AnalysisPeriod(period)
    now = now or datetime.now()
    start = now - timedelta(days=period.days)
    return group_expenses_by_category(
        filter_expenses_by_date_range(expenses, start, now)
    )


def get_top_expense_categories(
    expenses: Iterable[Expense],
    count: int = 5,
) -> list[CategoryAmount]:
    """The `count` categories with the highest totals, highest first."""
    totals = group_expenses_by_category(expenses)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryAmount(category=category, amount=amount)
        for category, amount in ranked[:count]
    ]


def calculate_month_expenses(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> Decimal:
    """Total spent in the calendar month containing `today`."""
    today = today or date.today()
    return sum(
        (
            expense.amount
            for expense in expenses
            if expense.date.year == today.year and expense.date.month == today.month
        ),
        ZERO,
    )


def validate_transaction_date(when: datetime, now: Optional[datetime] = None) -> bool:
    """Transactions may not be dated in the future."""
    now = now or datetime.now()
    return when <= now


# =============================================================================
# BUDGETS AND SUMMARIES
# =============================================================================

def calculate_budget_usage(budget: Budget) -> float:
    """Share of the budget limit already used, in percent (0-100)."""
    if budget.limit <= 0:
        return 0.0
    return _clamp_percentage(float(budget.current_amount / budget.limit * 100))


def calculate_financial_summary(
    financial_state: FinancialState,
    savings_goals: Iterable[SavingsGoal],
) -> FinancialSummary:
    """
    Headline figures for the dashboard.

    Income is implied: everything the user has now, has spent or has saved.
    """
    goals = list(savings_goals)
    total_savings = sum((goal.current_amount for goal in goals), ZERO)
    total_income = (
        financial_state.current_balance
        + financial_state.total_expenses
        + total_savings
    )

    return FinancialSummary(
        balance=financial_state.current_balance,
        total_expenses=financial_state.total_expenses,
        total_savings=total_savings,
        savings_percentage=(
            float(total_savings / total_income * 100) if total_income > 0 else 0.0
        ),
        goal_count=len(goals),
    )


def calculate_budget_overview(
    current_balance: Decimal,
    expenses_this_month: Decimal,
    monthly_income: Decimal,
    today: Optional[date] = None,
) -> BudgetOverview:
    """
    Monthly income against this month's spending, with a month-end projection.

    The projection extrapolates the average daily spend so far over the
    rest of a 30-day month.
    """
    today = today or date.today()
    current_day = min(today.day, DAYS_IN_MONTH)
    remaining_days = DAYS_IN_MONTH - current_day

    daily_expense = (
        to_cents(expenses_this_month / current_day) if expenses_this_month > 0 else ZERO
    )
    usage_ratio = (
        min(max(float(expenses_this_month / monthly_income), 0.0), 1.0)
        if monthly_income > 0
        else 0.0
    )

    return BudgetOverview(
        monthly_income=monthly_income,
        expenses_this_month=expenses_this_month,
        remaining_budget=monthly_income - expenses_this_month,
        budget_usage_ratio=usage_ratio,
        daily_expense=daily_expense,
        remaining_days=remaining_days,
        estimated_end_of_month_balance=to_cents(current_balance - daily_expense * remaining_days),
    )


# =============================================================================
# FORMATTING
# =============================================================================

def format_currency(amount: Decimal, symbol: str = "₺") -> str:
    """1234.5 -> '₺1,234.50'; negatives keep the sign in front."""
    amount = Decimal(str(amount))
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_date(value: date) -> str:
    """date(2025, 3, 5) -> '5 March 2025'."""
    return f"{value.day} {value.strftime('%B %Y')}"
