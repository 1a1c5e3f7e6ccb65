"""
Mailforge Kernel - Template storage

Async key/value persistence for templates:

  save(key, template)  -> None
  load(key)            -> dict | None    raw interchange data
  remove(key)          -> None

MemoryStorage is for tests. FileStorage keeps one JSON file per key and,
like a browser local-storage adapter, never lets an IO problem reach the
editor: failures are logged and reported as "nothing stored". Postgres
lives in postgres_storage.py.

load() only checks that the data looks like a template. Sanitizing is left
to the caller, which knows the block registry in use (EditorSession.load()
goes through SET_TEMPLATE).
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import re
from pathlib import Path
from typing import Any

from mailforge.config import settings
from mailforge.kernel.types import Template

logger = logging.getLogger(__name__)


class TemplateStorage:
    """
    Abstract storage interface.
    Implement with Postgres for production, files for local use, memory for tests.
    """

    async def save(self, key: str, template: Template) -> None:
        raise NotImplementedError

    async def load(self, key: str) -> dict[str, Any] | None:
        """Returns None if nothing template-shaped is stored under key."""
        raise NotImplementedError

    async def remove(self, key: str) -> None:
        raise NotImplementedError


def stored_template_data(data: Any) -> dict[str, Any] | None:
    """Stored data must at least look like a template (an object with a sections list)."""
    if not isinstance(data, dict) or not isinstance(data.get("sections"), list):
        return None
    return data


class MemoryStorage(TemplateStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}

    async def save(self, key: str, template: Template) -> None:
        self.items[key] = copy.deepcopy(template.to_dict())

    async def load(self, key: str) -> dict[str, Any] | None:
        data = self.items.get(key)
        return stored_template_data(copy.deepcopy(data)) if data is not None else None

    async def remove(self, key: str) -> None:
        self.items.pop(key, None)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStorage(TemplateStorage):
    """One `<key>.json` file per template under `directory` (default `settings.STORAGE_DIR`)."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory if directory is not None else settings.STORAGE_DIR)

    def path_for(self, key: str) -> Path:
        name = _UNSAFE_KEY_CHARS.sub("_", key).lstrip(".") or "_"
        return self.directory / f"{name}.json"

    async def save(self, key: str, template: Template) -> None:
        payload = json.dumps(template.to_dict(), ensure_ascii=False)
        try:
            await asyncio.to_thread(self._write, self.path_for(key), payload)
        except OSError as e:
            logger.warning("Failed to save template %r: %s", key, e)

    async def load(self, key: str) -> dict[str, Any] | None:
        path = self.path_for(key)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to load template %r: %s", key, e)
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored template %r is not valid JSON", key)
            return None
        return stored_template_data(data)

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove template %r: %s", key, e)

    def _write(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(path)
