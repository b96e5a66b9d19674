"""JSON-file-backed implementation of UserDirectory."""

from __future__ import annotations

from pathlib import Path

from marketplace.domain.repository.user_directory import UserDirectory, UserProfile
from marketplace.infrastructure.persistence.json_file import JsonFile


class JsonUserDirectory(UserDirectory):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    def get_by_id(self, user_id: str) -> UserProfile | None:
        for raw in self._file.load():
            if raw["id"] == user_id:
                return UserProfile(
                    id=raw["id"],
                    full_name=raw["full_name"],
                    email=raw["email"],
                    company_name=raw.get("company_name"),
                )
        return None
