"""
Profile Service

Keeps the onboarding profile and the "seen data" flags that decide
whether a section shows the user's data or its empty-state intro.

DESIGN DECISION: the in-memory profile is the source of truth for the
running app. Storage failures are logged and reported through the
return value, but never undo a change the user just made.
"""

from datetime import date
from typing import TYPE_CHECKING, Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.calculations.utils import (
    calculate_budget_overview,
    calculate_month_expenses,
)
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import BudgetOverview, SeenDataType, UserProfile
from finance_tracker.services.errors import ValidationFailedError
from finance_tracker.services.storage import ProfileStorageInterface, StorageError
from finance_tracker.validation import validate_user_profile

if TYPE_CHECKING:
    from finance_tracker.manager import FinanceManager

logger = structlog.get_logger(__name__)


class ProfileService:
    """Onboarding profile backed by a profile store."""

    def __init__(
        self,
        storage: ProfileStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._profile: Optional[UserProfile] = None

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile.model_copy(deep=True) if self._profile else None

    @property
    def is_onboarding_completed(self) -> bool:
        return bool(self._profile and self._profile.is_onboarding_completed)

    async def load_profile(self) -> Optional[UserProfile]:
        """
        Load the stored profile into memory.

        An unreadable profile is logged and treated as missing.
        """
        try:
            self._profile = await self._storage.get_profile()
        except StorageError as e:
            logger.error("profile_load_failed", error=str(e))
            self._profile = None

        return self.profile

    async def set_user_profile(self, profile: UserProfile) -> bool:
        """
        Replace the profile and persist it.

        Raises:
            ValidationFailedError: the onboarding answers are invalid

        Returns:
            True if the profile was persisted
        """
        result = validate_user_profile(
            profile.name,
            profile.age,
            profile.monthly_income,
            profile.income_day,
        )
        if not result.is_valid:
            raise ValidationFailedError(result)

        self._profile = profile.model_copy(deep=True)
        self._audit.record(AuditEventBuilder.profile_saved(
            name=profile.name,
            onboarding_completed=profile.is_onboarding_completed,
        ))
        return await self._persist()

    async def complete_onboarding(self) -> bool:
        """Mark onboarding as done. False when there is no profile yet."""
        if self._profile is None:
            return False

        self._profile.is_onboarding_completed = True
        self._audit.record(AuditEventBuilder.profile_saved(
            name=self._profile.name,
            onboarding_completed=True,
        ))
        return await self._persist()

    async def mark_data_as_seen(self, data_type: SeenDataType) -> bool:
        """Flip one "seen" flag on. False when there is no profile yet."""
        if self._profile is None:
            return False

        data_type = SeenDataType(data_type)
        if getattr(self._profile.has_seen_data, data_type.value):
            return True

        setattr(self._profile.has_seen_data, data_type.value, True)
        return await self._persist()

    def has_seen(self, data_type: SeenDataType) -> bool:
        if self._profile is None:
            return False
        return getattr(self._profile.has_seen_data, SeenDataType(data_type).value)

    # A section shows data only when it has some and the user has seen it
    def has_expenses_data(self, expense_count: int) -> bool:
        return expense_count > 0 and self.has_seen(SeenDataType.EXPENSES)

    def has_savings_data(self, goal_count: int) -> bool:
        return goal_count > 0 and self.has_seen(SeenDataType.SAVINGS)

    def has_transactions_data(self, transaction_count: int) -> bool:
        return transaction_count > 0 and self.has_seen(SeenDataType.TRANSACTIONS)

    def get_budget_overview(
        self,
        manager: "FinanceManager",
        today: Optional[date] = None,
    ) -> Optional[BudgetOverview]:
        """This month's spending against the profile's monthly income."""
        if self._profile is None:
            return None

        today = today or date.today()
        return calculate_budget_overview(
            current_balance=manager.get_current_balance(),
            expenses_this_month=calculate_month_expenses(manager.get_all_expenses(), today),
            monthly_income=self._profile.monthly_income,
            today=today,
        )

    async def _persist(self) -> bool:
        try:
            return await self._storage.save_profile(self._profile)
        except StorageError as e:
            logger.error("profile_save_failed", error=str(e))
            return False
