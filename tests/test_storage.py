"""
Tests for the Google Sheets storage.

The gspread client is replaced by mocks; no real API calls are made.
"""

import asyncio
import json

import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import gspread

from finance_tracker.models.audit import AuditEventBuilder, AuditEventType
from finance_tracker.models.finance import UserProfile
from finance_tracker.services.storage import (
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    StorageError,
)
from finance_tracker.services.storage.google_sheets import AUDIT_COLUMNS, PROFILE_COLUMNS


@pytest.fixture
def sheets_env(monkeypatch, tmp_path):
    credentials = tmp_path / "credentials.json"
    credentials.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
    monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")


def client_with_sheet(rows):
    sheet = MagicMock()
    sheet.get_all_values.return_value = rows
    client = MagicMock()
    client.get_audit_sheet.return_value = sheet
    client.get_profile_sheet.return_value = sheet
    return client, sheet


class TestGoogleSheetsClient:
    """Tests for connection and worksheet setup."""

    def test_connect_and_open_spreadsheet(self, sheets_env):
        """Test authentication and spreadsheet lookup."""
        with patch(
            "finance_tracker.services.storage.google_sheets.Credentials"
        ) as credentials, patch(
            "finance_tracker.services.storage.google_sheets.gspread.authorize"
        ) as authorize:
            client = GoogleSheetsClient()
            spreadsheet = client.get_spreadsheet()

        credentials.from_service_account_file.assert_called_once()
        authorize.return_value.open_by_key.assert_called_once_with("sheet-123")
        assert spreadsheet is authorize.return_value.open_by_key.return_value

    def test_missing_worksheet_is_created_with_headers(self, sheets_env):
        """Test that a missing audit sheet is created with its header row."""
        client = GoogleSheetsClient()
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("AuditLog")
        client._spreadsheet = spreadsheet

        sheet = client.get_audit_sheet()

        spreadsheet.add_worksheet.assert_called_once_with(
            title="AuditLog", rows=5000, cols=len(AUDIT_COLUMNS)
        )
        sheet.append_row.assert_called_once_with(AUDIT_COLUMNS)

    def test_existing_profile_sheet_is_reused(self, sheets_env):
        """Test that an existing sheet is returned as is."""
        client = GoogleSheetsClient()
        spreadsheet = MagicMock()
        client._spreadsheet = spreadsheet

        assert client.get_profile_sheet() is spreadsheet.worksheet.return_value
        spreadsheet.worksheet.assert_called_once_with("Profile")
        spreadsheet.add_worksheet.assert_not_called()

    def test_unknown_spreadsheet(self, sheets_env):
        """Test that a missing spreadsheet is a connection error."""
        client = GoogleSheetsClient()
        client._client = MagicMock()
        client._client.open_by_key.side_effect = gspread.SpreadsheetNotFound()

        with pytest.raises(ConnectionError):
            client.get_spreadsheet()


class TestGoogleSheetsAuditStorage:
    """Tests for audit rows."""

    def test_append_event(self):
        """Test that an event is written as one raw row."""
        client, sheet = client_with_sheet([])
        event = AuditEventBuilder.expense_added(uuid4(), Decimal("10"), "Food")

        assert asyncio.run(GoogleSheetsAuditStorage(client).append_event(event)) is True
        sheet.append_row.assert_called_once_with(
            event.to_sheets_row(), value_input_option="RAW"
        )

    def test_rows_read_back_as_events(self):
        """Test that written rows round-trip through the sheet layout."""
        correlation_id = uuid4()
        goal_id = uuid4()
        deposit = AuditEventBuilder.goal_funds_moved(
            goal_id, Decimal("5"), deposit=True, correlation_id=correlation_id
        )
        failure = AuditEventBuilder.system_error("StorageError", "disk full")
        client, _ = client_with_sheet([
            AUDIT_COLUMNS,
            deposit.to_sheets_row(),
            failure.to_sheets_row(),
            ["not-a-uuid", "garbage"],
        ])
        storage = GoogleSheetsAuditStorage(client)

        [found] = asyncio.run(storage.get_events_by_correlation_id(correlation_id))
        assert found.event_type == AuditEventType.GOAL_FUNDS_ADDED
        assert found.details == {"amount": "5.00"}

        [by_entity] = asyncio.run(storage.get_events_by_entity("goal", goal_id))
        assert by_entity.event_id == deposit.event_id

        recent = asyncio.run(storage.get_recent_events())
        assert {e.event_id for e in recent} == {deposit.event_id, failure.event_id}
        assert next(e for e in recent if e.event_id == failure.event_id).is_user_action is False

    def test_read_failure(self):
        """Test that a sheet error surfaces as StorageError."""
        client = MagicMock()
        client.get_audit_sheet.side_effect = RuntimeError("quota")

        with pytest.raises(StorageError):
            asyncio.run(GoogleSheetsAuditStorage(client).get_recent_events())


class TestGoogleSheetsProfileStorage:
    """Tests for the profile row."""

    def test_empty_sheet(self):
        """Test that a header-only sheet holds no profile."""
        client, _ = client_with_sheet([PROFILE_COLUMNS])
        storage = GoogleSheetsProfileStorage(client)

        assert asyncio.run(storage.get_profile()) is None
        assert asyncio.run(storage.delete_profile()) is False

    def test_save_writes_row_two(self):
        """Test that the profile is stored as JSON in the data row."""
        client, sheet = client_with_sheet([PROFILE_COLUMNS])
        profile = UserProfile(
            name="Deniz",
            age=30,
            monthly_income=Decimal("20000"),
            income_day=15,
        )

        assert asyncio.run(GoogleSheetsProfileStorage(client).save_profile(profile)) is True

        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "A2:B2"
        assert json.loads(kwargs["values"][0][1])["name"] == "Deniz"

    def test_load_profile(self):
        """Test reading the stored JSON back."""
        profile = UserProfile(
            name="Deniz",
            age=30,
            monthly_income=Decimal("20000"),
            income_day=15,
            is_onboarding_completed=True,
        )
        client, _ = client_with_sheet([
            PROFILE_COLUMNS,
            ["2025-03-10T12:00:00", profile.model_dump_json()],
        ])
        storage = GoogleSheetsProfileStorage(client)

        loaded = asyncio.run(storage.get_profile())
        assert loaded == profile
        assert asyncio.run(storage.delete_profile()) is True

    def test_malformed_profile(self):
        """Test that an unreadable profile row raises StorageError."""
        client, _ = client_with_sheet([PROFILE_COLUMNS, ["2025-03-10", "{broken"]])

        with pytest.raises(StorageError):
            asyncio.run(GoogleSheetsProfileStorage(client).get_profile())
