"""Shared fixtures."""

import pytest

from finance_tracker.config import get_settings
from finance_tracker.manager import FinanceManager


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings and no shared manager for every test."""
    monkeypatch.delenv("FINANCE_INITIAL_BALANCE", raising=False)
    get_settings.cache_clear()
    FinanceManager.reset_instance()
    yield
    FinanceManager.reset_instance()
    get_settings.cache_clear()
