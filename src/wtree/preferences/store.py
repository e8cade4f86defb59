"""Loading and saving the JSON preference file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .models import Preferences

logger = logging.getLogger(__name__)


class PreferenceLoadError(RuntimeError):
    """Raised when the preference file exists but cannot be parsed."""


class PreferenceStore:
    """Reads and writes :class:`Preferences` from a JSON file in a directory."""

    def __init__(self, directory: Path, filename: str = ".worktree-config.json") -> None:
        self._path = Path(directory) / filename

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Preferences:
        """Return stored preferences, or defaults when no file exists."""

        if not self._path.exists():
            return Preferences()

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PreferenceLoadError(f"Failed to read {self._path}: {exc}") from exc

        if not isinstance(document, dict):
            raise PreferenceLoadError(f"Expected a JSON object in {self._path}")

        try:
            return Preferences.model_validate(document)
        except ValidationError as exc:
            raise PreferenceLoadError(f"Preference validation error in {self._path}: {exc}") from exc

    def save(self, preferences: Preferences) -> None:
        payload = preferences.model_dump(by_alias=True, exclude_none=True)
        self._path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        logger.debug("Saved preferences", extra={"path": str(self._path)})

    def remember_command(self, preferences: Preferences, command: str, *, default: bool = False) -> Preferences:
        if command not in preferences.saved_commands:
            preferences.saved_commands.append(command)
        if default:
            preferences.default_command = command
        self.save(preferences)
        return preferences

    def remember_route(self, preferences: Preferences, route: str, *, default: bool = False) -> Preferences:
        if route not in preferences.saved_routes:
            preferences.saved_routes.append(route)
        if default:
            preferences.default_route = route
        self.save(preferences)
        return preferences

    def remember_file(self, preferences: Preferences, relative_path: str) -> Preferences:
        if relative_path not in preferences.files_to_copy:
            preferences.files_to_copy.append(relative_path)
        self.save(preferences)
        return preferences

    def clear(self) -> Preferences:
        """Reset the file to an empty object and return fresh defaults."""

        self._path.write_text("{}\n", encoding="utf-8")
        return Preferences()


__all__ = ["PreferenceLoadError", "PreferenceStore"]
