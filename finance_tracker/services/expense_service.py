"""
Expense Service

The primary holder of the spendable balance. Owns:
- the list of expenses
- the balance ledger (every balance-affecting transaction)
- the FinancialState (balance, total expenses, total savings)

INVARIANT: the balance never goes negative. Operations that would push it
below zero are refused, and an overwritten state with a negative balance
is clamped to zero.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.calculations.utils import validate_transaction_date
from finance_tracker.models.finance import (
    Expense,
    ExpenseInput,
    FinancialState,
    LedgerCategory,
    Transaction,
    TransactionType,
)
from finance_tracker.services.errors import (
    ExpenseNotFoundError,
    InsufficientBalanceError,
    InvalidTransactionDateError,
    TransactionNotFoundError,
    ValidationFailedError,
)
from finance_tracker.validation import validate_positive_number, validate_required_field

logger = structlog.get_logger(__name__)


def newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Sort by date descending; on equal dates the later-recorded entry wins."""
    return sorted(reversed(transactions), key=lambda t: t.date, reverse=True)


class ExpenseService:
    """Expenses, the balance ledger and the financial state."""

    def __init__(self, initial_balance: Decimal = Decimal("0")):
        self._expenses: list[Expense] = []
        self._transactions: list[Transaction] = []
        self._state = FinancialState(current_balance=Decimal(str(initial_balance)))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_all_expenses(self) -> list[Expense]:
        return [expense.model_copy() for expense in self._expenses]

    def get_current_balance(self) -> Decimal:
        return self._state.current_balance

    def get_total_expenses(self) -> Decimal:
        return self._state.total_expenses

    def get_financial_state(self) -> FinancialState:
        return self._state.model_copy()

    def get_expenses_by_category(self, category: str) -> list[Expense]:
        return [e.model_copy() for e in self._expenses if e.category == category]

    def get_expenses_by_date_range(self, start: datetime, end: datetime) -> list[Expense]:
        """Expenses dated within [start, end]."""
        return [e.model_copy() for e in self._expenses if start <= e.date <= end]

    def get_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        return [t.model_copy() for t in newest_first(self._transactions)[:limit]]

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction.model_copy()
        return None

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, expense_data: ExpenseInput) -> Expense:
        """
        Record an expense and debit the balance.

        Raises:
            InvalidTransactionDateError: the date is in the future
            ValidationFailedError: the amount is not positive or not in whole
                cents, the category is blank or a field is too long
            InsufficientBalanceError: the balance does not cover the amount
        """
        when = expense_data.date or datetime.now()

        if not validate_transaction_date(when):
            raise InvalidTransactionDateError(f"Expense date is in the future: {when.isoformat()}")

        for result in (
            validate_positive_number(expense_data.amount, "Expense amount"),
            validate_required_field(expense_data.category, "Category"),
        ):
            if not result.is_valid:
                raise ValidationFailedError(result)

        if self._state.current_balance < expense_data.amount:
            raise InsufficientBalanceError(
                f"Insufficient balance: {self._state.current_balance} < {expense_data.amount}"
            )

        try:
            expense = Expense(
                amount=expense_data.amount,
                category=expense_data.category,
                description=expense_data.description or "",
                date=when,
            )
        except PydanticValidationError as e:
            raise ValidationFailedError.from_pydantic(e) from e
        self._expenses.append(expense)

        self._transactions.append(Transaction(
            amount=expense.amount,
            type=TransactionType.EXPENSE,
            category=expense.category,
            description=expense.description,
            date=when,
        ))

        self._apply(balance=-expense.amount, expenses=expense.amount)
        return expense.model_copy()

    def remove_expense(self, expense_id: UUID) -> Expense:
        """
        Delete an expense and give its amount back to the balance.

        The ledger entry it produced goes with it, so it cannot be undone
        a second time.
        """
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                del self._expenses[index]
                entry = self._find_expense_entry(expense)
                if entry is not None:
                    self._transactions.remove(entry)
                self._apply(balance=expense.amount, expenses=-expense.amount)
                return expense

        raise ExpenseNotFoundError(expense_id)

    # -------------------------------------------------------------------------
    # Balance ledger
    # -------------------------------------------------------------------------

    def add_to_balance(
        self,
        amount: Decimal,
        description: str = "Balance adjustment",
        related_goal_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Add (positive) or remove (negative) money from the balance.

        Positive amounts are recorded as income, negative ones as an
        expense in the Savings category. The ledger amount is always
        the absolute value.
        """
        amount = Decimal(str(amount))
        if amount != 0:
            result = validate_positive_number(abs(amount), "Amount")
            if not result.is_valid:
                raise ValidationFailedError(result)
        if amount < 0 and self._state.current_balance < -amount:
            raise InsufficientBalanceError(
                f"Insufficient balance: {self._state.current_balance} < {-amount}"
            )

        transaction = Transaction(
            amount=abs(amount),
            type=TransactionType.INCOME if amount >= 0 else TransactionType.EXPENSE,
            category=(
                LedgerCategory.INCOME.value if amount >= 0 else LedgerCategory.SAVINGS.value
            ),
            description=description,
            related_goal_id=related_goal_id,
        )
        self._transactions.append(transaction)
        self._apply(balance=amount)
        return transaction.model_copy()

    def undo_transaction(self, transaction_id: UUID) -> Transaction:
        """
        Reverse a ledger entry and drop it from the ledger.

        - expense: the amount returns to the balance; if the entry came from
          a recorded expense, that expense is removed and the expense total
          shrinks with it
        - income: the amount leaves the balance (refused if not covered)
        - transfer: no balance effect

        Returns the removed transaction.
        """
        index = next(
            (i for i, t in enumerate(self._transactions) if t.id == transaction_id),
            None,
        )
        if index is None:
            raise TransactionNotFoundError(transaction_id)

        transaction = self._transactions[index]

        if transaction.type == TransactionType.EXPENSE:
            expense_index = next(
                (
                    i for i, e in enumerate(self._expenses)
                    if e.amount == transaction.amount
                    and e.category == transaction.category
                    and e.date == transaction.date
                ),
                None,
            )
            if expense_index is not None:
                del self._expenses[expense_index]
                self._apply(balance=transaction.amount, expenses=-transaction.amount)
            else:
                self._apply(balance=transaction.amount)

        elif transaction.type == TransactionType.INCOME:
            if self._state.current_balance < transaction.amount:
                raise InsufficientBalanceError(
                    f"Cannot undo income of {transaction.amount}: "
                    f"balance is only {self._state.current_balance}"
                )
            self._apply(balance=-transaction.amount)

        else:
            self._apply()

        del self._transactions[index]
        return transaction

    def handle_transaction(self, transaction: Transaction) -> Transaction:
        """
        Apply an externally built transaction and record it.

        Expenses must be covered by the balance and count towards the
        expense total; income is added; transfers are only recorded.
        """
        if transaction.type == TransactionType.EXPENSE:
            if self._state.current_balance < transaction.amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance: {self._state.current_balance} < {transaction.amount}"
                )
            self._apply(balance=-transaction.amount, expenses=transaction.amount)
        elif transaction.type == TransactionType.INCOME:
            self._apply(balance=transaction.amount)
        else:
            self._apply()

        self._transactions.append(transaction.model_copy())
        return transaction

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def update_financial_state(self, new_state: FinancialState) -> FinancialState:
        """Overwrite the financial state; a negative balance becomes zero."""
        state = new_state.model_copy()
        if state.current_balance < 0:
            logger.warning(
                "negative_balance_prevented",
                requested_balance=str(state.current_balance),
            )
            state.current_balance = Decimal("0")

        self._state = state
        return state.model_copy()

    def _find_expense_entry(self, expense: Expense) -> Optional[Transaction]:
        """The ledger entry recorded for an expense (same amount, category and date)."""
        return next(
            (
                t for t in self._transactions
                if t.type == TransactionType.EXPENSE
                and t.related_goal_id is None
                and t.amount == expense.amount
                and t.category == expense.category
                and t.date == expense.date
            ),
            None,
        )

    def _apply(self, balance: Decimal = Decimal("0"), expenses: Decimal = Decimal("0")) -> None:
        self._state.current_balance += balance
        self._state.total_expenses += expenses
        self._state.last_updated = datetime.now()
