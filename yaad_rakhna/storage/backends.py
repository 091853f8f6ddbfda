"""Durable attribute backends.

A backend keeps one attribute document per user. Documents are plain nested
key-value mappings (``{"items": {name: location}}``). Every backend reports I/O
and configuration problems as :class:`DurableStoreUnavailable`.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import Settings
from ..errors import DurableStoreUnavailable

logger = logging.getLogger(__name__)


class AttributesBackend(Protocol):
    async def get(self, user_id: str) -> dict | None:  # noqa: D401
        """Return the user's attribute document, or ``None`` if there is none."""

    async def set(self, user_id: str, document: dict) -> None:  # noqa: D401
        """Replace the user's attribute document."""


class MemoryBackend:
    """Process-local backend, mainly for tests and the interactive CLI."""

    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}

    async def get(self, user_id: str) -> dict | None:
        document = self.documents.get(user_id)
        return copy.deepcopy(document) if document is not None else None

    async def set(self, user_id: str, document: dict) -> None:
        self.documents[user_id] = copy.deepcopy(document)


class JsonFileBackend:
    """All users' documents in one JSON file, keyed by user id.

    File access runs in a worker thread. There is no locking: two writers
    racing on the same file keep whichever document lands last.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DurableStoreUnavailable(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise DurableStoreUnavailable(f"{self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, dict]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise DurableStoreUnavailable(f"cannot write {self.path}: {exc}") from exc

    async def get(self, user_id: str) -> dict | None:
        data = await asyncio.to_thread(self._read_all)
        return data.get(user_id)

    async def set(self, user_id: str, document: dict) -> None:
        def _update() -> None:
            data = self._read_all()
            data[user_id] = document
            self._write_all(data)

        await asyncio.to_thread(_update)


class SqliteBackend:
    """One row per user in a SQLite table, document stored as JSON text."""

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS attributes (
            user_id TEXT PRIMARY KEY,
            document TEXT NOT NULL
        )
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)

    async def _connect(self) -> aiosqlite.Connection:
        try:
            conn = await aiosqlite.connect(self.path)
        except (OSError, aiosqlite.Error) as exc:
            raise DurableStoreUnavailable(f"cannot open {self.path}: {exc}") from exc
        try:
            await conn.execute(self._SCHEMA)
        except aiosqlite.Error as exc:
            # Each connection owns a worker thread; it must not outlive a failed open.
            await conn.close()
            raise DurableStoreUnavailable(f"{self.path} is not a usable database: {exc}") from exc
        return conn

    async def get(self, user_id: str) -> dict | None:
        conn = await self._connect()
        try:
            async with conn.execute(
                "SELECT document FROM attributes WHERE user_id = ?", (user_id,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise DurableStoreUnavailable(str(exc)) from exc
        finally:
            await conn.close()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise DurableStoreUnavailable(f"corrupt document for {user_id}") from exc

    async def set(self, user_id: str, document: dict) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO attributes (user_id, document) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET document = excluded.document
                """,
                (user_id, json.dumps(document, ensure_ascii=False)),
            )
            await conn.commit()
        except aiosqlite.Error as exc:
            raise DurableStoreUnavailable(str(exc)) from exc
        finally:
            await conn.close()


def build_backend(settings: Settings) -> AttributesBackend | None:
    """Pick the durable backend for ``settings``; ``None`` means ephemeral-only."""

    kind = settings.durable_backend
    if kind == "memory":
        logger.info("Using in-memory durable storage")
        return MemoryBackend()
    if kind in {"json", "sqlite"}:
        if settings.durable_path is None:
            logger.warning(
                "durable backend %s configured without durable_path; "
                "only session storage will be used",
                kind,
                extra={"event_type": "durable_misconfigured", "tier": "durable"},
            )
            return None
        logger.info("Using %s durable storage at %s", kind, settings.durable_path)
        if kind == "json":
            return JsonFileBackend(settings.durable_path)
        return SqliteBackend(settings.durable_path)
    logger.warning(
        "No durable storage configured. Only session storage will be used.",
        extra={"event_type": "durable_disabled", "tier": "durable"},
    )
    return None
