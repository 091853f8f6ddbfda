from __future__ import annotations

import logging

from .config import Settings, get_settings
from .dialogue.controller import DialogueController
from .logging import configure_logging
from .responses import ResponseComposer
from .skill import Skill
from .storage.backends import AttributesBackend, build_backend
from .storage.items import ItemStore
from .vocabulary import default_vocabulary, load_vocabulary


def build_skill(
    settings: Settings | None = None, backend: AttributesBackend | None = None
) -> Skill:
    """Wire the skill from ``settings``.

    ``backend`` overrides the durable backend chosen by the settings.
    """

    settings = settings or get_settings()
    log = logging.getLogger(__name__)

    if settings.vocabulary_path is not None:
        vocabulary = load_vocabulary(settings.vocabulary_path)
    else:
        vocabulary = default_vocabulary()
    if backend is None:
        backend = build_backend(settings)

    store = ItemStore(backend, vocabulary)
    controller = DialogueController(store, ResponseComposer(vocabulary))

    log.info(
        "skill starting",
        extra={
            "user_agent": settings.user_agent,
            "locale": settings.locale,
            "durable_backend": type(backend).__name__ if backend is not None else "none",
        },
    )
    return Skill(controller)


_skill: Skill | None = None


async def handler(envelope: dict, context: object | None = None) -> dict:
    """Entry point for hosting platforms that call a single async function."""

    global _skill
    if _skill is None:
        configure_logging()
        _skill = build_skill()
    return await _skill.handle(envelope)
