"""Persistence utilities for Hotkey Auto Clicker configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from errors import ConfigPersistFailed
from models import ClickerConfig


def default_storage_path() -> Path:
    """Application-owned location of the configuration file."""
    return Path.home() / ".hotkey_auto_clicker" / "config.json"


class SettingsManager:
    """Handles loading and saving the clicker configuration to disk."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._storage_path = Path(storage_path) if storage_path else default_storage_path()

    @property
    def storage_path(self) -> Path:
        """Absolute path to the configuration file."""
        return self._storage_path

    def load(self) -> ClickerConfig:
        """Load the configuration, returning defaults if the file is missing or corrupt."""
        path = self.storage_path
        if not path.exists():
            return ClickerConfig()

        try:
            content = path.read_text(encoding="utf-8")
            raw_data = json.loads(content)
            if not isinstance(raw_data, dict):
                raise ValueError("Configuration file has invalid structure")
            return ClickerConfig.from_dict(raw_data)
        except (OSError, ValueError, TypeError):
            # Corrupt or unreadable file; fall back to defaults but keep backup for inspection.
            backup_path = path.with_suffix(".bak")
            try:
                path.replace(backup_path)
            except OSError:
                pass
            return ClickerConfig()

    def save(self, config: ClickerConfig) -> None:
        """Persist the configuration atomically.

        Raises:
            ConfigPersistFailed: if the file cannot be written; no partial file is left
        """
        path = self.storage_path
        tmp_path = path.with_suffix(".tmp")
        payload = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise ConfigPersistFailed(f"Could not save configuration to {path}: {exc}") from exc
