"""Tests for the audit logger."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.models.audit import AuditEventBuilder, AuditEventType
from finance_tracker.services import InMemoryAuditStorage


def sample_event():
    return AuditEventBuilder.expense_added(uuid4(), Decimal("10"), "Food")


class TestAuditLogger:
    """Tests for recording and flushing audit events."""

    def test_local_only_logger_queues_nothing(self):
        """Test that without storage events are only logged."""
        audit = AuditLogger()
        audit.record(sample_event())

        assert audit.pending == []
        assert asyncio.run(audit.flush()) == 0

    def test_flush_persists_in_order(self):
        """Test that queued events reach storage in order."""
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        first, second = sample_event(), sample_event()
        audit.record(first)
        audit.record(second)

        assert asyncio.run(audit.flush()) == 2
        assert [e.event_id for e in storage.events] == [first.event_id, second.event_id]
        assert audit.pending == []

    def test_flush_failure_keeps_events(self):
        """Test that a storage error never escapes and nothing is lost."""
        storage = MagicMock()
        storage.append_event = AsyncMock(side_effect=RuntimeError("sheet unavailable"))
        audit = AuditLogger(storage)
        audit.record(sample_event())

        assert asyncio.run(audit.flush()) == 0
        assert len(audit.pending) == 1

    def test_flush_stops_at_refused_event(self):
        """Test that a refused event and those after it stay queued."""
        storage = MagicMock()
        storage.append_event = AsyncMock(side_effect=[True, False])
        audit = AuditLogger(storage)
        for _ in range(3):
            audit.record(sample_event())

        assert asyncio.run(audit.flush()) == 1
        assert len(audit.pending) == 2

    def test_queue_keeps_newest_events(self):
        """Test that an unflushed queue drops its oldest events past the cap."""
        audit = AuditLogger(InMemoryAuditStorage(), max_pending=2)
        events = [sample_event() for _ in range(3)]
        for event in events:
            audit.record(event)

        assert [e.event_id for e in audit.pending] == [e.event_id for e in events[1:]]

    def test_record_helpers(self):
        """Test the rejection and error shortcuts."""
        audit = AuditLogger(InMemoryAuditStorage())
        audit.record_rejection("add_expense", "Insufficient balance")
        audit.record_error("StorageError", "disk full")

        assert [e.event_type for e in audit.pending] == [
            AuditEventType.OPERATION_REJECTED,
            AuditEventType.SYSTEM_ERROR,
        ]

    def test_correlation_ids_are_unique(self):
        """Test that every action gets its own correlation id."""
        assert create_correlation_id() != create_correlation_id()


class TestInMemoryAuditStorage:
    """Tests for the in-memory audit queries."""

    def test_queries(self):
        """Test lookups by correlation id, entity and recency."""
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        goal_id = uuid4()
        deposit = AuditEventBuilder.goal_funds_moved(
            goal_id, Decimal("5"), deposit=True, correlation_id=correlation_id
        )
        other = sample_event()
        asyncio.run(storage.append_event(deposit))
        asyncio.run(storage.append_event(other))

        assert asyncio.run(storage.get_events_by_correlation_id(correlation_id)) == [deposit]
        assert asyncio.run(storage.get_events_by_entity("goal", goal_id)) == [deposit]
        assert len(asyncio.run(storage.get_recent_events(limit=1))) == 1
