"""
Finance Manager

This module ties the ledger services together and defines the
operations the app calls:
1. Expenses (add / remove)
2. Savings goals (create / update / remove / add funds / withdraw)
3. Balance (top up / undo / external transactions)
4. Analysis (progress, category breakdowns, summary)

DESIGN DECISION: The manager enforces the boundaries:
- Money moving between the balance and a goal is taken from one side
  before it is given to the other, and refunded if the second step fails
- Every operation is validated before any state changes
- Every change is audited

Services raise domain exceptions; the manager turns them into a refused
operation (None / False) and remembers the reason in `last_error`.
"""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Optional, TypeVar, Union
from uuid import UUID

import structlog

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.calculations import calculation_service
from finance_tracker.calculations.utils import ZERO, format_currency
from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import (
    AnalysisPeriod,
    CategoryAmount,
    Expense,
    ExpenseInput,
    FinancialState,
    FinancialSummary,
    SavingsGoal,
    SavingsGoalInput,
    SavingsGoalUpdate,
    Transaction,
    TransactionType,
    ValidationResult,
)
from finance_tracker.services import (
    ExpenseService,
    FinanceError,
    GoalNotFoundError,
    InsufficientGoalFundsError,
    SavingsService,
    TransactionNotFoundError,
)
from finance_tracker.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Amount = Union[Decimal, int, float, str]


class FinanceManager:
    """
    Coordinates the expense and savings services.

    ExpenseService holds the spendable balance; SavingsService holds
    the goals. The manager keeps FinancialState.total_savings in step
    with the goals after every change.
    """

    _instance: Optional["FinanceManager"] = None

    def __init__(
        self,
        initial_balance: Optional[Amount] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = get_settings().ledger
        balance = (
            self._settings.initial_balance
            if initial_balance is None
            else Decimal(str(initial_balance))
        )

        self._expenses = ExpenseService(balance)
        self._savings = SavingsService(
            default_category=self._settings.default_goal_category,
            default_color=self._settings.default_goal_color,
        )
        self._calc = calculation_service
        self._audit = audit_logger or AuditLogger()
        self._last_error: Optional[str] = None

        self._sync()

    @classmethod
    def get_instance(cls, initial_balance: Optional[Amount] = None) -> "FinanceManager":
        """
        The process-wide manager.

        `initial_balance` only matters on the first call.
        """
        if cls._instance is None:
            cls._instance = cls(initial_balance)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    @property
    def last_error(self) -> Optional[str]:
        """Reason the most recent refused operation was refused."""
        return self._last_error

    def clear_error(self) -> None:
        self._last_error = None

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def _refuse(self, operation: str, reason: Union[str, Exception], **details) -> None:
        message = str(reason)
        self._last_error = message
        logger.warning("operation_rejected", operation=operation, reason=message, **details)
        self._audit.record(AuditEventBuilder.operation_rejected(
            operation=operation,
            reason=message,
            details=details or None,
        ))

    def _check(self, operation: str, result: ValidationResult, **details) -> bool:
        if not result.is_valid:
            self._refuse(operation, result.error_message or "Validation failed", **details)
        return result.is_valid

    def _attempt(self, operation: str, action: Callable[[], T], **details) -> Optional[T]:
        """Run a service call; a FinanceError becomes a refusal (None)."""
        try:
            return action()
        except FinanceError as e:
            self._refuse(operation, e, **details)
            return None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _sync(self) -> None:
        state = self._expenses.get_financial_state()
        state.total_savings, _ = self._savings.get_savings_info()
        state.last_updated = datetime.now()
        self._expenses.update_financial_state(state)

    def get_financial_state(self) -> FinancialState:
        self._sync()
        return self._expenses.get_financial_state()

    def update_financial_state(self, new_state: FinancialState) -> FinancialState:
        """
        Overwrite the balance figures.

        Total savings is always re-derived from the goals afterwards.
        """
        previous = self._expenses.get_current_balance()
        self._expenses.update_financial_state(new_state)
        self._sync()

        self._audit.record(AuditEventBuilder.financial_state_overwritten(
            previous_balance=previous,
            new_balance=self._expenses.get_current_balance(),
        ))
        return self._expenses.get_financial_state()

    def get_current_balance(self) -> Decimal:
        return self._expenses.get_current_balance()

    def get_total_expenses(self) -> Decimal:
        return self._expenses.get_total_expenses()

    def get_total_savings(self) -> Decimal:
        return self._savings.get_total_savings()

    def format_amount(self, amount: Amount) -> str:
        """Amount in the configured currency, e.g. '₺1,234.50'."""
        return format_currency(Decimal(str(amount)), self._settings.currency_symbol)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def get_all_expenses(self) -> list[Expense]:
        return self._expenses.get_all_expenses()

    def add_expense(self, expense_data: ExpenseInput) -> Optional[Expense]:
        validation = self._calc.validate_expense_data(expense_data, self.get_current_balance())
        if not self._check("add_expense", validation):
            return None

        expense = self._attempt("add_expense", lambda: self._expenses.add_expense(expense_data))
        if expense is None:
            return None

        self._sync()
        self._audit.record(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            amount=expense.amount,
            category=expense.category,
        ))
        return expense

    def remove_expense(self, expense_id: UUID) -> bool:
        expense = self._attempt(
            "remove_expense",
            lambda: self._expenses.remove_expense(expense_id),
            expense_id=str(expense_id),
        )
        if expense is None:
            return False

        self._sync()
        self._audit.record(AuditEventBuilder.expense_removed(
            expense_id=expense.id,
            amount=expense.amount,
        ))
        return True

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def get_all_savings_goals(self) -> list[SavingsGoal]:
        return self._savings.get_all_goals()

    def get_goal(self, goal_id: UUID) -> Optional[SavingsGoal]:
        return self._savings.get_goal_by_id(goal_id)

    def add_savings_goal(self, goal_data: SavingsGoalInput) -> Optional[SavingsGoal]:
        """
        Create a savings goal.

        With `deduct_from_balance`, the initial amount is moved out of the
        balance; the goal is not created if the balance cannot cover it.
        """
        validation = self._calc.validate_savings_goal_data(goal_data)
        if not self._check("add_savings_goal", validation):
            return None

        initial = goal_data.current_amount or ZERO
        deduct = goal_data.deduct_from_balance and initial > 0
        if deduct and not self._check(
            "add_savings_goal",
            self._calc.validate_add_funds(initial, self.get_current_balance()),
        ):
            return None

        goal = self._attempt("add_savings_goal", lambda: self._savings.add_goal(goal_data))
        if goal is None:
            return None

        if deduct:
            self._expenses.add_to_balance(
                -goal.current_amount,
                f"Initial amount for {goal.name}",
                related_goal_id=goal.id,
            )

        self._sync()
        self._audit.record(AuditEventBuilder.goal_created(
            goal_id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
            initial_amount=goal.current_amount,
        ))
        return goal

    def update_savings_goal(self, goal_id: UUID, updates: SavingsGoalUpdate) -> bool:
        if self._savings.get_goal_by_id(goal_id) is None:
            self._refuse("update_savings_goal", GoalNotFoundError(goal_id))
            return False

        if updates.target_amount is not None and not self._check(
            "update_savings_goal",
            self._calc.validate_positive_value(updates.target_amount, "Target amount"),
            goal_id=str(goal_id),
        ):
            return False

        goal = self._attempt(
            "update_savings_goal",
            lambda: self._savings.update_goal(goal_id, updates),
            goal_id=str(goal_id),
        )
        if goal is None:
            return False

        self._sync()
        self._audit.record(AuditEventBuilder.goal_updated(
            goal_id=goal.id,
            fields=sorted(updates.model_dump(exclude_unset=True, exclude_none=True)),
        ))
        return True

    def remove_savings_goal(self, goal_id: UUID) -> bool:
        """Delete a goal; whatever it still holds goes back to the balance."""
        goal = self._attempt(
            "remove_savings_goal",
            lambda: self._savings.remove_goal(goal_id),
            goal_id=str(goal_id),
        )
        if goal is None:
            return False

        if goal.current_amount > 0:
            self._expenses.add_to_balance(
                goal.current_amount,
                f"Savings goal {goal.name} removed",
                related_goal_id=goal.id,
            )

        self._sync()
        self._audit.record(AuditEventBuilder.goal_removed(
            goal_id=goal.id,
            name=goal.name,
            returned_amount=goal.current_amount,
        ))
        return True

    def add_funds_to_goal(
        self,
        goal_id: UUID,
        amount: Amount,
        description: Optional[str] = None,
    ) -> bool:
        """
        Move money from the balance into a goal.

        The balance is debited first; if crediting the goal then fails,
        the debit is undone.
        """
        amount = Decimal(str(amount))
        if self._savings.get_goal_by_id(goal_id) is None:
            self._refuse("add_funds_to_goal", GoalNotFoundError(goal_id))
            return False

        if not self._check(
            "add_funds_to_goal",
            self._calc.validate_add_funds(amount, self.get_current_balance()),
            goal_id=str(goal_id),
        ):
            return False

        correlation_id = create_correlation_id()
        debit = self._attempt(
            "add_funds_to_goal",
            lambda: self._expenses.add_to_balance(
                -amount,
                f"{description or 'Savings'} - moved to savings goal",
                related_goal_id=goal_id,
            ),
            goal_id=str(goal_id),
        )
        if debit is None:
            return False

        try:
            self._savings.add_funds_to_goal(goal_id, amount, description or "")
        except FinanceError as e:
            self._expenses.undo_transaction(debit.id)
            self._refuse("add_funds_to_goal", e, goal_id=str(goal_id))
            return False

        self._sync()
        self._audit.record(AuditEventBuilder.balance_adjusted(
            transaction_id=debit.id,
            amount=-amount,
            new_balance=self.get_current_balance(),
            correlation_id=correlation_id,
        ))
        self._audit.record(AuditEventBuilder.goal_funds_moved(
            goal_id=goal_id,
            amount=amount,
            deposit=True,
            correlation_id=correlation_id,
        ))
        return True

    def withdraw_funds_from_goal(
        self,
        goal_id: UUID,
        amount: Amount,
        description: Optional[str] = None,
    ) -> bool:
        """Move money from a goal back to the balance."""
        amount = Decimal(str(amount))
        goal = self._savings.get_goal_by_id(goal_id)
        if goal is None:
            self._refuse("withdraw_funds_from_goal", GoalNotFoundError(goal_id))
            return False

        if not self._check(
            "withdraw_funds_from_goal",
            self._calc.validate_withdraw_funds(amount, goal.current_amount),
            goal_id=str(goal_id),
        ):
            return False

        withdrawal = self._attempt(
            "withdraw_funds_from_goal",
            lambda: self._savings.withdraw_funds_from_goal(goal_id, amount, description or ""),
            goal_id=str(goal_id),
        )
        if withdrawal is None:
            return False

        correlation_id = create_correlation_id()
        credit = self._expenses.add_to_balance(
            amount,
            f"{description or 'Savings withdrawal'} - taken from savings goal",
            related_goal_id=goal_id,
        )

        self._sync()
        self._audit.record(AuditEventBuilder.goal_funds_moved(
            goal_id=goal_id,
            amount=amount,
            deposit=False,
            correlation_id=correlation_id,
        ))
        self._audit.record(AuditEventBuilder.balance_adjusted(
            transaction_id=credit.id,
            amount=amount,
            new_balance=self.get_current_balance(),
            correlation_id=correlation_id,
        ))
        return True

    # -------------------------------------------------------------------------
    # Balance ledger
    # -------------------------------------------------------------------------

    def get_recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        """Balance and goal ledgers merged, newest first."""
        if limit is None:
            limit = self._settings.recent_transactions_limit
        merged = (
            self._expenses.get_recent_transactions(limit)
            + self._savings.get_goal_transactions()
        )
        merged.sort(key=lambda t: t.date, reverse=True)
        return merged[:limit]

    def get_goal_transactions(self, goal_id: UUID) -> list[Transaction]:
        return self._savings.get_goal_transactions(goal_id)

    def add_to_balance(self, amount: Amount, description: Optional[str] = None) -> bool:
        amount = Decimal(str(amount))
        if not self._check(
            "add_to_balance",
            self._calc.validate_positive_value(amount, "Amount to add"),
        ):
            return False

        transaction = self._expenses.add_to_balance(amount, description or "Balance adjustment")

        self._sync()
        self._audit.record(AuditEventBuilder.balance_adjusted(
            transaction_id=transaction.id,
            amount=amount,
            new_balance=self.get_current_balance(),
        ))
        return True

    def undo_transaction(self, transaction_id: UUID) -> bool:
        """
        Reverse a balance ledger entry.

        Entries that moved money to or from a goal also put the goal back
        where it was, as long as the goal still exists.
        """
        transaction = self._expenses.get_transaction(transaction_id)
        if transaction is None:
            self._refuse("undo_transaction", TransactionNotFoundError(transaction_id))
            return False

        goal_delta = ZERO
        goal = None
        if transaction.related_goal_id and transaction.type != TransactionType.TRANSFER:
            goal = self._savings.get_goal_by_id(transaction.related_goal_id)
            goal_delta = (
                -transaction.amount
                if transaction.type == TransactionType.EXPENSE
                else transaction.amount
            )

        if goal is not None and goal.current_amount + goal_delta < 0:
            self._refuse(
                "undo_transaction",
                InsufficientGoalFundsError(
                    f"Goal {goal.name} holds {goal.current_amount}, cannot return {-goal_delta}"
                ),
                transaction_id=str(transaction_id),
            )
            return False

        undone = self._attempt(
            "undo_transaction",
            lambda: self._expenses.undo_transaction(transaction_id),
            transaction_id=str(transaction_id),
        )
        if undone is None:
            return False

        if goal is not None:
            self._savings.revert_goal_amount(
                goal.id,
                goal_delta,
                f"Undo: {transaction.description}",
            )

        self._sync()
        self._audit.record(AuditEventBuilder.transaction_undone(
            transaction_id=undone.id,
            amount=undone.amount,
            transaction_type=undone.type.value,
            related_goal_id=undone.related_goal_id,
        ))
        return True

    def handle_transaction(self, transaction: Transaction) -> bool:
        """Apply a transaction built elsewhere (e.g. an import)."""
        handled = self._attempt(
            "handle_transaction",
            lambda: self._expenses.handle_transaction(transaction),
            transaction_id=str(transaction.id),
        )
        if handled is None:
            return False

        self._sync()
        self._audit.record(AuditEventBuilder.transaction_handled(
            transaction_id=handled.id,
            transaction_type=handled.type.value,
            amount=handled.amount,
        ))
        return True

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def calculate_goal_progress(self, goal_id: UUID) -> float:
        return self._calc.calculate_goal_progress(self._savings.get_goal_by_id(goal_id))

    def calculate_remaining_amount(self, goal_id: UUID) -> Decimal:
        return self._calc.calculate_remaining_amount(self._savings.get_goal_by_id(goal_id))

    def calculate_estimated_time(self, goal_id: UUID, monthly_contribution: Amount) -> int:
        return self._calc.calculate_estimated_time(
            self._savings.get_goal_by_id(goal_id),
            Decimal(str(monthly_contribution)),
        )

    def calculate_overall_savings_progress(self) -> float:
        return self._calc.calculate_overall_savings_progress(self._savings.get_all_goals())

    def get_category_totals(self) -> dict[str, Decimal]:
        return self._calc.get_category_totals(self._expenses.get_all_expenses())

    def get_category_percentages(self) -> dict[str, float]:
        return self._calc.get_category_percentages(self._expenses.get_all_expenses())

    def get_weekly_expense_analysis(self) -> dict[str, Decimal]:
        return self._calc.get_expense_analysis_by_period(
            self._expenses.get_all_expenses(), AnalysisPeriod.WEEKLY
        )

    def get_monthly_expense_analysis(self) -> dict[str, Decimal]:
        return self._calc.get_expense_analysis_by_period(
            self._expenses.get_all_expenses(), AnalysisPeriod.MONTHLY
        )

    def get_yearly_expense_analysis(self) -> dict[str, Decimal]:
        return self._calc.get_expense_analysis_by_period(
            self._expenses.get_all_expenses(), AnalysisPeriod.YEARLY
        )

    def get_top_spending_categories(self, count: Optional[int] = None) -> list[CategoryAmount]:
        if count is None:
            count = self._settings.top_categories_count
        return self._calc.get_top_spending_categories(self._expenses.get_all_expenses(), count)

    def get_financial_summary(self) -> FinancialSummary:
        return self._calc.calculate_financial_summary(
            self.get_financial_state(),
            self._savings.get_all_goals(),
        )


def get_finance_manager() -> FinanceManager:
    """The shared FinanceManager, created on first use."""
    return FinanceManager.get_instance()


def create_finance_manager(
    use_storage: bool = True,
    initial_balance: Optional[Amount] = None,
) -> FinanceManager:
    """
    Factory function to create a fully wired, standalone manager.

    Args:
        use_storage: Whether to persist the audit trail to Google Sheets.
                    Set to False for testing without storage.
        initial_balance: Starting balance; the configured one if omitted.

    Audit events are queued in memory until the caller awaits
    `manager.audit_logger.flush()`, e.g. after each user action. Without
    flushing, only the newest MAX_PENDING_EVENTS are kept.
    """
    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("audit_storage_not_configured", error=str(e))
            audit_logger = AuditLogger()  # Local-only logging
    else:
        audit_logger = AuditLogger()  # Local-only logging

    return FinanceManager(initial_balance, audit_logger=audit_logger)
