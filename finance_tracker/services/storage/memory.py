"""
In-Memory Storage

Process-local implementations of the storage interfaces.
Used in tests and whenever no persistent backend is configured.
"""

from typing import Optional
from uuid import UUID

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import UserProfile
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    ProfileStorageInterface,
)


class InMemoryProfileStorage(ProfileStorageInterface):
    """Holds the profile in a single attribute."""

    def __init__(self, profile: Optional[UserProfile] = None):
        self._profile = profile

    async def get_profile(self) -> Optional[UserProfile]:
        return self._profile.model_copy(deep=True) if self._profile else None

    async def save_profile(self, profile: UserProfile) -> bool:
        self._profile = profile.model_copy(deep=True)
        return True

    async def delete_profile(self) -> bool:
        existed = self._profile is not None
        self._profile = None
        return existed


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
