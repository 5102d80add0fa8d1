"""
Abstract Storage Interface

DESIGN DECISION: The ledger itself lives in memory. What does get
persisted goes through these interfaces:
1. The user profile (onboarding answers and "seen data" flags)
2. The audit trail

This lets us keep the profile in a local JSON file, in Google Sheets,
or in memory for tests, without the services knowing which.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import UserProfile


class ProfileStorageInterface(ABC):
    """
    Key-value style storage for the single user profile.
    """

    @abstractmethod
    async def get_profile(self) -> Optional[UserProfile]:
        """
        Load the stored profile.

        Returns:
            The profile, or None if none was saved yet

        Raises:
            StorageError: If the stored profile cannot be read
        """
        pass

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> bool:
        """
        Persist the profile, replacing any previous one.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    async def delete_profile(self) -> bool:
        """
        Remove the stored profile.

        Returns:
            True if a profile was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., both legs of a goal deposit).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'expense', 'goal')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
