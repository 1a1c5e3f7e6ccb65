"""
PostgresStorage adapter for the Mailforge session layer.

Implements the TemplateStorage protocol using Postgres as the backend.
Templates are stored as jsonb in the email_templates table.
"""

from __future__ import annotations

import json
from typing import Any

import asyncpg

from mailforge.kernel.errors import StorageError
from mailforge.kernel.storage import TemplateStorage, stored_template_data
from mailforge.kernel.types import Template

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS email_templates (
    key text PRIMARY KEY,
    template jsonb NOT NULL,
    updated_at timestamptz NOT NULL DEFAULT now()
)
"""


class PostgresStorage(TemplateStorage):
    """
    Postgres-based storage for email templates.

    Driver errors are raised as StorageError so callers only deal with
    one exception type.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def ensure_schema(self) -> None:
        """Create the email_templates table if it does not exist."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(SCHEMA_SQL)
        except asyncpg.PostgresError as e:
            raise StorageError(f"Failed to create schema: {e}") from e

    async def save(self, key: str, template: Template) -> None:
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO email_templates (key, template, updated_at)
                    VALUES ($1, $2::jsonb, now())
                    ON CONFLICT (key)
                    DO UPDATE SET template = EXCLUDED.template, updated_at = now()
                    """,
                    key,
                    json.dumps(template.to_dict()),
                )
        except asyncpg.PostgresError as e:
            raise StorageError(f"Failed to save template {key!r}: {e}") from e

    async def load(self, key: str) -> dict[str, Any] | None:
        """Fetch raw template data. Returns None if not found or not template-shaped."""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT template FROM email_templates WHERE key = $1",
                    key,
                )
        except asyncpg.PostgresError as e:
            raise StorageError(f"Failed to load template {key!r}: {e}") from e
        if row is None:
            return None
        data = row["template"]
        # asyncpg returns jsonb as text unless a codec is registered
        if isinstance(data, str):
            data = json.loads(data)
        return stored_template_data(data)

    async def remove(self, key: str) -> None:
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM email_templates WHERE key = $1", key)
        except asyncpg.PostgresError as e:
            raise StorageError(f"Failed to remove template {key!r}: {e}") from e

    async def close(self) -> None:
        """Close the connection pool."""
        await self.pool.close()
