"""Two-tier item storage.

The ephemeral tier lives for one conversation and is keyed by conversation id.
The durable tier is an optional :class:`AttributesBackend` keyed by user id.
Reads go ephemeral first and backfill from durable on a hit; writes go to both
tiers with no transactional coupling between them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .. import metrics
from ..errors import DurableStoreUnavailable, ErrorCategory
from ..normalizer import normalize
from ..vocabulary import Vocabulary
from .backends import AttributesBackend

logger = logging.getLogger(__name__)

ITEMS_KEY = "items"


@dataclass
class DurableResult:
    """Outcome of one durable-tier call.

    ``ok`` is False when the tier is absent or failed; ``document`` is then
    empty and ``error`` says why (``None`` when no backend is configured).
    """

    ok: bool
    document: dict = field(default_factory=dict)
    error: Exception | None = None
    latency_ms: float | None = None

    @property
    def items(self) -> dict[str, str]:
        items = self.document.get(ITEMS_KEY)
        return items if isinstance(items, dict) else {}


class ItemStore:
    def __init__(
        self,
        backend: AttributesBackend | None = None,
        vocabulary: Vocabulary | None = None,
    ) -> None:
        self.backend = backend
        self.vocabulary = vocabulary
        self._ephemeral: dict[str, dict[str, str]] = {}
        if backend is None:
            logger.info(
                "durable_degraded",
                extra={"event_type": "durable_degraded", "tier": "durable"},
            )

    def ephemeral(self, scope: str) -> dict[str, str]:
        """Return (creating if needed) the ephemeral map for a conversation."""
        return self._ephemeral.setdefault(scope, {})

    def end_session(self, scope: str) -> None:
        self._ephemeral.pop(scope, None)

    # Durable boundary -----------------------------------------------------

    async def _load_durable(self, user: str) -> DurableResult:
        if self.backend is None:
            return DurableResult(ok=False)
        try:
            with metrics.timed(metrics.durable_latency_ms) as watch:
                document = await self.backend.get(user)
        except DurableStoreUnavailable as exc:
            return DurableResult(ok=False, error=exc, latency_ms=watch.elapsed_ms)
        if document is not None and not isinstance(document, dict):
            error = DurableStoreUnavailable(
                f"document for {user} is {type(document).__name__}, not an object"
            )
            return DurableResult(ok=False, error=error, latency_ms=watch.elapsed_ms)
        return DurableResult(ok=True, document=document or {}, latency_ms=watch.elapsed_ms)

    async def _save_durable(self, user: str, document: dict) -> DurableResult:
        if self.backend is None:
            return DurableResult(ok=False)
        try:
            with metrics.timed(metrics.durable_latency_ms) as watch:
                await self.backend.set(user, document)
        except DurableStoreUnavailable as exc:
            return DurableResult(ok=False, document=document, error=exc, latency_ms=watch.elapsed_ms)
        return DurableResult(ok=True, document=document, latency_ms=watch.elapsed_ms)

    def _degraded(self, operation: str, user: str, result: DurableResult) -> None:
        # Absent backend was already reported at construction.
        if result.error is None:
            return
        metrics.durable_failures_total.inc()
        logger.warning(
            "durable_degraded",
            extra={
                "event_type": "durable_degraded",
                "tier": "durable",
                "user_id": user,
                "operation": operation,
                "error_category": ErrorCategory.STORAGE.value,
                "error": str(result.error),
                "latency_ms": result.latency_ms,
            },
        )

    # Operations -----------------------------------------------------------

    async def store(self, scope: str, user: str, name: str, location: str) -> None:
        key = normalize(name, self.vocabulary)
        where = location.lower().strip()
        logger.info(
            "item_store",
            extra={"event_type": "item_store", "conversation_id": scope, "user_id": user},
        )
        self.ephemeral(scope)[key] = where

        loaded = await self._load_durable(user)
        if not loaded.ok:
            self._degraded("store", user, loaded)
            return
        document = dict(loaded.document)
        items = dict(loaded.items)
        items[key] = where
        document[ITEMS_KEY] = items
        saved = await self._save_durable(user, document)
        if not saved.ok:
            self._degraded("store", user, saved)

    async def retrieve(self, scope: str, user: str, name: str) -> str | None:
        """Return the remembered location for ``name``, or ``None`` if unknown."""

        key = normalize(name, self.vocabulary)
        session = self.ephemeral(scope)
        if key in session:
            metrics.ephemeral_hits_total.inc()
            logger.debug(
                "item_found",
                extra={"event_type": "item_found", "tier": "ephemeral", "conversation_id": scope},
            )
            return session[key]

        loaded = await self._load_durable(user)
        if not loaded.ok:
            self._degraded("retrieve", user, loaded)
        elif key in loaded.items:
            location = loaded.items[key]
            session[key] = location
            metrics.durable_hits_total.inc()
            logger.debug(
                "item_found",
                extra={"event_type": "item_found", "tier": "durable", "user_id": user},
            )
            return location

        metrics.lookup_misses_total.inc()
        logger.info(
            "item_not_found",
            extra={"event_type": "item_not_found", "conversation_id": scope, "user_id": user},
        )
        return None

    async def list_all(self, scope: str, user: str) -> dict[str, str]:
        """Union of both tiers; ephemeral entries win on collision."""

        loaded = await self._load_durable(user)
        if not loaded.ok:
            self._degraded("list_all", user, loaded)
        merged = dict(loaded.items)
        merged.update(self.ephemeral(scope))
        return merged

    async def clear_all(self, scope: str, user: str) -> None:
        self._ephemeral[scope] = {}

        loaded = await self._load_durable(user)
        if not loaded.ok:
            self._degraded("clear_all", user, loaded)
            return
        if not loaded.document:
            return
        document = dict(loaded.document)
        document[ITEMS_KEY] = {}
        saved = await self._save_durable(user, document)
        if not saved.ok:
            self._degraded("clear_all", user, saved)
