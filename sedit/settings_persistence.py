"""Persistence of per-document editing positions.

The cursor position of every saved document is remembered in a JSON file
in the user's state directory, indexed by the document's absolute path,
and restored the next time the document is opened.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

POSITION_KEYS = ("cursor_line", "cursor_offset")


class SettingsPersistence:
    """Manages persistent storage of per-document settings.

    Settings are stored in a JSON file in the user's state directory,
    indexed by the absolute path of the document being edited.
    """

    def __init__(self, state_dir: Optional[str | os.PathLike] = None):
        """Initialize settings persistence.

        Args:
            state_dir: Directory holding the settings file. Defaults to the
                platform's per-user state directory.
        """
        if state_dir is None:
            state_dir = platformdirs.user_state_dir("sedit")
        self._state_dir = Path(state_dir)
        self._settings_file = self._state_dir / "positions.json"
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _ensure_state_dir(self) -> None:
        try:
            self._state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create state directory %s: %s", self._state_dir, e)

    def _load_all_settings(self) -> Dict[str, Dict[str, Any]]:
        """Load all settings from disk.

        Returns:
            Dictionary mapping document paths to their settings.
            Returns empty dict if file doesn't exist or can't be read.
        """
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._settings_file, e)
            self._settings_cache = {}
            return self._settings_cache

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_all_settings(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Write all settings to disk via a temporary file and rename."""
        self._ensure_state_dir()
        temp_file = self._settings_file.with_name(
            EditorConstants.ATOMIC_SAVE_PREFIX + self._settings_file.name
            + EditorConstants.ATOMIC_SAVE_SUFFIX
        )

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._settings_file, e)
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

        self._settings_cache = settings
        return True

    def load_position(self, document_path: Optional[str]) -> Optional[tuple[int, int]]:
        """Return the remembered (line, offset) for a document, if valid."""
        if document_path is None:
            return None
        settings = self._load_all_settings().get(os.path.abspath(document_path))
        if not isinstance(settings, dict):
            return None
        values = [settings.get(key) for key in POSITION_KEYS]
        if not all(self.validate_setting(key, value) and value is not None
                   for key, value in zip(POSITION_KEYS, values)):
            logger.warning("Ignoring invalid position for %s: %r", document_path, settings)
            return None
        return values[0], values[1]

    def save_position(self, document_path: Optional[str], line: int, offset: int) -> bool:
        """Remember the cursor position for a document.

        Returns:
            True if save was successful, False otherwise.
        """
        if document_path is None:
            return False
        all_settings = dict(self._load_all_settings())
        all_settings[os.path.abspath(document_path)] = {
            "cursor_line": line,
            "cursor_offset": offset,
        }
        return self._save_all_settings(all_settings)

    @staticmethod
    def validate_setting(key: str, value: Any) -> bool:
        """Validate a setting value.

        Unknown settings are considered valid for forward compatibility.
        """
        if value is None:
            return True
        if key in POSITION_KEYS:
            # bool is an int subclass but never a position
            return isinstance(value, int) and not isinstance(value, bool) and value >= 0
        return True

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None
