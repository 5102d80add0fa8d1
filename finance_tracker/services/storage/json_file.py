"""
JSON File Profile Storage

Keeps the user profile in a single JSON file on disk, the local
equivalent of the key-value store a mobile app would use.
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from finance_tracker.config import get_settings
from finance_tracker.models.finance import UserProfile
from finance_tracker.services.storage.interface import (
    ProfileStorageInterface,
    StorageError,
)


class JsonFileProfileStorage(ProfileStorageInterface):
    """Profile stored as pretty-printed JSON at a configurable path."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path else get_settings().profile.storage_path

    @property
    def path(self) -> Path:
        return self._path

    async def get_profile(self) -> Optional[UserProfile]:
        if not self._path.exists():
            return None

        try:
            return UserProfile.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise StorageError(f"Failed to read profile from {self._path}: {e}")

    async def save_profile(self, profile: UserProfile) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(profile.model_dump_json(indent=2), encoding="utf-8")
            return True
        except OSError as e:
            raise StorageError(f"Failed to save profile to {self._path}: {e}")

    async def delete_profile(self) -> bool:
        try:
            self._path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete profile at {self._path}: {e}")
