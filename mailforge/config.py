"""
Mailforge configuration: all environment variables in one place.

Read from environment at import time. Nothing is required.
"""

from __future__ import annotations

import os


class Settings:
    """Settings from environment variables."""

    # Editor history
    MAX_HISTORY: int = int(os.environ.get("MAILFORGE_MAX_HISTORY", "50"))
    HISTORY_DEBOUNCE_MS: int = int(os.environ.get("MAILFORGE_HISTORY_DEBOUNCE_MS", "500"))

    # Persistence
    AUTOSAVE_DEBOUNCE_MS: int = int(os.environ.get("MAILFORGE_AUTOSAVE_DEBOUNCE_MS", "500"))
    STORAGE_DIR: str = os.environ.get("MAILFORGE_STORAGE_DIR", ".mailforge")
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")

    # Logging
    LOG_LEVEL: str = os.environ.get("MAILFORGE_LOG_LEVEL", "WARNING")

    @property
    def history_debounce_seconds(self) -> float:
        return self.HISTORY_DEBOUNCE_MS / 1000

    @property
    def autosave_debounce_seconds(self) -> float:
        return self.AUTOSAVE_DEBOUNCE_MS / 1000


settings = Settings()
