"""
Savings Service

Owns the savings goals and their ledger (initial deposits, deposits,
withdrawals, cancellations, each linked to its goal).

The service only moves money in and out of goals. Whether that money
comes from or goes back to the spendable balance is the finance
manager's business.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.calculations.utils import (
    ZERO,
    calculate_goal_progress,
    generate_savings_suggestions,
)
from finance_tracker.models.finance import (
    GoalProgress,
    LedgerCategory,
    SavingsGoal,
    SavingsGoalInput,
    SavingsGoalUpdate,
    SavingsSuggestion,
    Transaction,
    TransactionType,
)
from finance_tracker.services.errors import (
    GoalNotFoundError,
    InsufficientGoalFundsError,
    ValidationFailedError,
)
from finance_tracker.validation import validate_positive_number, validate_required_field


class SavingsService:
    """Savings goals and the per-goal ledger."""

    def __init__(
        self,
        default_category: str = "General",
        default_color: Optional[str] = None,
    ):
        self._goals: list[SavingsGoal] = []
        self._transactions: list[Transaction] = []
        self._default_category = default_category
        self._default_color = default_color

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_all_goals(self) -> list[SavingsGoal]:
        return [goal.model_copy() for goal in self._goals]

    def get_goal_by_id(self, goal_id: UUID) -> Optional[SavingsGoal]:
        goal = self._find(goal_id)
        return goal.model_copy() if goal else None

    def get_total_savings(self) -> Decimal:
        return sum((goal.current_amount for goal in self._goals), ZERO)

    def get_all_goals_progress(self) -> list[GoalProgress]:
        return [
            GoalProgress(goal_id=goal.id, progress=calculate_goal_progress(goal))
            for goal in self._goals
        ]

    def get_goal_progress(self, goal_id: UUID) -> float:
        goal = self._find(goal_id)
        return calculate_goal_progress(goal) if goal else 0.0

    def get_goal_transactions(self, goal_id: Optional[UUID] = None) -> list[Transaction]:
        """Entries for one goal, or the whole goal ledger when no id is given."""
        if not goal_id:
            return [t.model_copy() for t in self._transactions]
        return [t.model_copy() for t in self._transactions if t.related_goal_id == goal_id]

    def get_savings_info(self) -> tuple[Decimal, list[SavingsGoal]]:
        """(total savings, goals) for syncing the financial state."""
        return self.get_total_savings(), self.get_all_goals()

    def generate_savings_suggestions(self, monthly_income: Decimal) -> list[SavingsSuggestion]:
        return generate_savings_suggestions(monthly_income)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_goal(self, goal_data: SavingsGoalInput) -> SavingsGoal:
        """
        Create a goal.

        A non-zero initial amount is recorded as a transfer into the goal.
        """
        for result in (
            validate_required_field(goal_data.name, "Goal name"),
            validate_positive_number(goal_data.target_amount, "Target amount"),
        ):
            if not result.is_valid:
                raise ValidationFailedError(result)

        try:
            goal = SavingsGoal(
                name=goal_data.name,
                target_amount=goal_data.target_amount,
                current_amount=goal_data.current_amount or ZERO,
                category=goal_data.category or self._default_category,
                color=goal_data.color or self._default_color,
                target_date=goal_data.target_date,
                deduct_from_balance=goal_data.deduct_from_balance,
            )
        except PydanticValidationError as e:
            raise ValidationFailedError.from_pydantic(e) from e
        self._goals.append(goal)

        if goal.current_amount > 0:
            self._record(
                goal,
                goal.current_amount,
                TransactionType.TRANSFER,
                LedgerCategory.SAVINGS,
                f"Initial amount for {goal.name}",
            )

        return goal.model_copy()

    def add_funds_to_goal(
        self,
        goal_id: UUID,
        amount: Decimal,
        description: str = "",
    ) -> Transaction:
        goal = self._require(goal_id)
        self._require_positive(amount, "Amount to add")

        goal.current_amount += amount
        return self._record(
            goal,
            amount,
            TransactionType.EXPENSE,
            LedgerCategory.SAVINGS,
            description or f"Funds added to {goal.name}",
        )

    def withdraw_funds_from_goal(
        self,
        goal_id: UUID,
        amount: Decimal,
        description: str = "",
    ) -> Transaction:
        goal = self._require(goal_id)
        self._require_positive(amount, "Amount to withdraw")

        if goal.current_amount < amount:
            raise InsufficientGoalFundsError(
                f"Goal {goal.name} holds {goal.current_amount}, cannot withdraw {amount}"
            )

        goal.current_amount -= amount
        return self._record(
            goal,
            amount,
            TransactionType.INCOME,
            LedgerCategory.SAVINGS_WITHDRAWAL,
            description or f"Funds withdrawn from {goal.name}",
        )

    def update_goal(self, goal_id: UUID, updates: SavingsGoalUpdate) -> SavingsGoal:
        """Apply the fields explicitly set on `updates`."""
        index = self._index(goal_id)
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        # Re-validate through the model so constraints still hold
        try:
            updated = SavingsGoal.model_validate({**self._goals[index].model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationFailedError.from_pydantic(e) from e
        self._goals[index] = updated
        return updated.model_copy()

    def remove_goal(self, goal_id: UUID) -> SavingsGoal:
        """
        Delete a goal.

        Money still held by the goal is recorded as leaving it.
        """
        goal = self._goals.pop(self._index(goal_id))

        if goal.current_amount > 0:
            self._record(
                goal,
                goal.current_amount,
                TransactionType.INCOME,
                LedgerCategory.GOAL_CANCELLATION,
                f"Goal {goal.name} removed, {goal.current_amount:.2f} returned to balance",
            )

        return goal

    def revert_goal_amount(self, goal_id: UUID, delta: Decimal, description: str) -> Optional[Transaction]:
        """
        Adjust a goal when one of its balance movements is undone.

        Returns None when the goal no longer exists. The goal never drops
        below zero.
        """
        goal = self._find(goal_id)
        if goal is None:
            return None

        if delta < 0 and goal.current_amount < -delta:
            raise InsufficientGoalFundsError(
                f"Goal {goal.name} holds {goal.current_amount}, cannot revert {-delta}"
            )

        goal.current_amount += delta
        return self._record(
            goal,
            abs(delta),
            TransactionType.TRANSFER,
            LedgerCategory.SAVINGS,
            description,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _find(self, goal_id: UUID) -> Optional[SavingsGoal]:
        return next((goal for goal in self._goals if goal.id == goal_id), None)

    def _index(self, goal_id: UUID) -> int:
        for index, goal in enumerate(self._goals):
            if goal.id == goal_id:
                return index
        raise GoalNotFoundError(goal_id)

    def _require(self, goal_id: UUID) -> SavingsGoal:
        return self._goals[self._index(goal_id)]

    @staticmethod
    def _require_positive(amount: Decimal, field_name: str) -> None:
        result = validate_positive_number(amount, field_name)
        if not result.is_valid:
            raise ValidationFailedError(result)

    def _record(
        self,
        goal: SavingsGoal,
        amount: Decimal,
        transaction_type: TransactionType,
        category: LedgerCategory,
        description: str,
    ) -> Transaction:
        transaction = Transaction(
            amount=amount,
            type=transaction_type,
            category=category.value,
            description=description,
            related_goal_id=goal.id,
        )
        self._transactions.append(transaction)
        return transaction.model_copy()
