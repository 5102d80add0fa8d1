"""Tests for ExpenseService: expenses, balance ledger and undo."""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from finance_tracker.models.finance import (
    ExpenseInput,
    FinancialState,
    Transaction,
    TransactionType,
)
from finance_tracker.services import (
    ExpenseNotFoundError,
    ExpenseService,
    InsufficientBalanceError,
    InvalidTransactionDateError,
    TransactionNotFoundError,
    ValidationFailedError,
)


@pytest.fixture
def service():
    return ExpenseService(Decimal("1000"))


def spend(service, amount, category="Food", **kwargs):
    return service.add_expense(ExpenseInput(amount=Decimal(amount), category=category, **kwargs))


class TestAddExpense:
    """Tests for recording expenses."""

    def test_add_expense_debits_balance(self, service):
        """Test balance, total and ledger after an expense."""
        expense = spend(service, "250", description="Groceries")

        assert service.get_current_balance() == Decimal("750")
        assert service.get_total_expenses() == Decimal("250")
        assert service.get_all_expenses() == [expense]

        [transaction] = service.get_recent_transactions()
        assert transaction.type == TransactionType.EXPENSE
        assert transaction.amount == Decimal("250")
        assert transaction.category == "Food"
        assert transaction.description == "Groceries"
        assert transaction.date == expense.date

    def test_spending_the_whole_balance_is_allowed(self, service):
        """Test that the balance may reach exactly zero."""
        spend(service, "1000")
        assert service.get_current_balance() == Decimal("0")

    def test_insufficient_balance(self, service):
        """Test that an uncovered expense changes nothing."""
        with pytest.raises(InsufficientBalanceError):
            spend(service, "1000.01")

        assert service.get_current_balance() == Decimal("1000")
        assert service.get_all_expenses() == []
        assert service.get_recent_transactions() == []

    def test_future_date_rejected(self, service):
        """Test that expenses cannot be dated in the future."""
        with pytest.raises(InvalidTransactionDateError):
            spend(service, "10", date=datetime.now() + timedelta(days=1))

    @pytest.mark.parametrize("amount,category", [("0", "Food"), ("-5", "Food"), ("5", " ")])
    def test_invalid_input(self, service, amount, category):
        """Test non-positive amounts and blank categories."""
        with pytest.raises(ValidationFailedError):
            spend(service, amount, category)

    def test_validation_error_carries_result(self, service):
        """Test that the failing rule's message is kept."""
        with pytest.raises(ValidationFailedError) as exc_info:
            spend(service, "5", "")
        assert exc_info.value.result.error_message == "Category cannot be empty"

    def test_model_constraint_becomes_validation_error(self, service):
        """Test that a too long description is reported as a validation failure."""
        with pytest.raises(ValidationFailedError) as exc_info:
            spend(service, "10", description="d" * 501)

        assert exc_info.value.result.error_message.startswith("description:")
        assert service.get_current_balance() == Decimal("1000")
        assert service.get_recent_transactions() == []

    def test_fractional_cents_rejected(self, service):
        """Test that amounts below one cent never reach the ledger."""
        with pytest.raises(ValidationFailedError):
            spend(service, "10.999")
        with pytest.raises(ValidationFailedError):
            service.add_to_balance(Decimal("-0.005"))
        assert service.get_recent_transactions() == []

    def test_reads_return_copies(self, service):
        """Test that callers cannot mutate service state."""
        spend(service, "10")
        service.get_all_expenses()[0].amount = Decimal("999")
        service.get_financial_state().current_balance = Decimal("0")

        assert service.get_all_expenses()[0].amount == Decimal("10")
        assert service.get_current_balance() == Decimal("990")


class TestRemoveExpense:
    """Tests for deleting expenses."""

    def test_remove_restores_balance(self, service):
        """Test that removal gives the money back."""
        expense = spend(service, "100")
        service.remove_expense(expense.id)

        assert service.get_current_balance() == Decimal("1000")
        assert service.get_total_expenses() == Decimal("0")
        assert service.get_all_expenses() == []

    def test_remove_drops_ledger_entry(self, service):
        """Test that the expense's ledger entry goes with it."""
        expense = spend(service, "100")
        [entry] = service.get_recent_transactions()
        service.remove_expense(expense.id)

        assert service.get_recent_transactions() == []
        with pytest.raises(TransactionNotFoundError):
            service.undo_transaction(entry.id)
        assert service.get_current_balance() == Decimal("1000")

    def test_remove_unknown(self, service):
        """Test that an unknown id raises."""
        with pytest.raises(ExpenseNotFoundError):
            service.remove_expense(uuid4())


class TestQueries:
    """Tests for filtered reads."""

    def test_by_category(self, service):
        """Test filtering by category."""
        spend(service, "10", "Food")
        spend(service, "20", "Transport")
        assert [e.amount for e in service.get_expenses_by_category("Transport")] == [Decimal("20")]

    def test_by_date_range(self, service):
        """Test the inclusive date range."""
        old = datetime(2025, 1, 1)
        spend(service, "10", date=old)
        spend(service, "20")
        found = service.get_expenses_by_date_range(old, old)
        assert [e.amount for e in found] == [Decimal("10")]

    def test_recent_transactions_newest_first(self, service):
        """Test ordering and limit."""
        spend(service, "1", date=datetime(2025, 1, 1))
        spend(service, "2", date=datetime(2025, 1, 3))
        spend(service, "3", date=datetime(2025, 1, 2))

        recent = service.get_recent_transactions(limit=2)
        assert [t.amount for t in recent] == [Decimal("2"), Decimal("3")]


class TestBalanceLedger:
    """Tests for balance adjustments and undo."""

    def test_positive_adjustment_is_income(self, service):
        """Test a top-up."""
        transaction = service.add_to_balance(Decimal("200"))
        assert transaction.type == TransactionType.INCOME
        assert transaction.category == "Income"
        assert transaction.description == "Balance adjustment"
        assert service.get_current_balance() == Decimal("1200")

    def test_negative_adjustment_is_savings_expense(self, service):
        """Test money leaving the balance for savings."""
        goal_id = uuid4()
        transaction = service.add_to_balance(Decimal("-300"), "To goal", related_goal_id=goal_id)
        assert transaction.type == TransactionType.EXPENSE
        assert transaction.category == "Savings"
        assert transaction.amount == Decimal("300")
        assert transaction.related_goal_id == goal_id
        assert service.get_current_balance() == Decimal("700")
        assert service.get_total_expenses() == Decimal("0")

    def test_negative_adjustment_needs_cover(self, service):
        """Test that the balance cannot go negative."""
        with pytest.raises(InsufficientBalanceError):
            service.add_to_balance(Decimal("-1000.01"))

    def test_undo_expense_removes_expense(self, service):
        """Test that undoing an expense entry removes the expense too."""
        spend(service, "100")
        [transaction] = service.get_recent_transactions()

        undone = service.undo_transaction(transaction.id)

        assert undone.id == transaction.id
        assert service.get_current_balance() == Decimal("1000")
        assert service.get_total_expenses() == Decimal("0")
        assert service.get_all_expenses() == []
        assert service.get_recent_transactions() == []

    def test_undo_savings_debit(self, service):
        """Test that undoing a savings debit only restores the balance."""
        transaction = service.add_to_balance(Decimal("-100"))
        service.undo_transaction(transaction.id)
        assert service.get_current_balance() == Decimal("1000")
        assert service.get_total_expenses() == Decimal("0")

    def test_undo_income(self, service):
        """Test that undoing a top-up takes the money back out."""
        transaction = service.add_to_balance(Decimal("500"))
        service.undo_transaction(transaction.id)
        assert service.get_current_balance() == Decimal("1000")

    def test_undo_income_refused_when_spent(self, service):
        """Test that undoing income cannot push the balance below zero."""
        transaction = service.add_to_balance(Decimal("500"))
        spend(service, "1400")

        with pytest.raises(InsufficientBalanceError):
            service.undo_transaction(transaction.id)

        assert service.get_transaction(transaction.id) is not None
        assert service.get_current_balance() == Decimal("100")

    def test_undo_unknown(self, service):
        """Test that an unknown id raises."""
        with pytest.raises(TransactionNotFoundError):
            service.undo_transaction(uuid4())


class TestExternalState:
    """Tests for handle_transaction and update_financial_state."""

    def test_handle_expense(self, service):
        """Test an external expense."""
        service.handle_transaction(Transaction(
            amount=Decimal("100"),
            type=TransactionType.EXPENSE,
            category="Import",
        ))
        assert service.get_current_balance() == Decimal("900")
        assert service.get_total_expenses() == Decimal("100")
        assert len(service.get_recent_transactions()) == 1

    def test_handle_expense_needs_cover(self, service):
        """Test that an uncovered external expense is refused."""
        with pytest.raises(InsufficientBalanceError):
            service.handle_transaction(Transaction(
                amount=Decimal("5000"),
                type=TransactionType.EXPENSE,
                category="Import",
            ))
        assert service.get_recent_transactions() == []

    def test_handle_income_and_transfer(self, service):
        """Test that income adds and transfers only record."""
        service.handle_transaction(Transaction(
            amount=Decimal("100"),
            type=TransactionType.INCOME,
            category="Income",
        ))
        service.handle_transaction(Transaction(
            amount=Decimal("100"),
            type=TransactionType.TRANSFER,
            category="Savings",
        ))
        assert service.get_current_balance() == Decimal("1100")
        assert len(service.get_recent_transactions()) == 2

    def test_update_state_clamps_negative_balance(self, service):
        """Test that an overwritten negative balance becomes zero."""
        state = service.update_financial_state(FinancialState(
            current_balance=Decimal("-50"),
            total_expenses=Decimal("10"),
        ))
        assert state.current_balance == Decimal("0")
        assert service.get_current_balance() == Decimal("0")
        assert service.get_total_expenses() == Decimal("10")
