"""Platform edge of the skill.

A request envelope comes in, a response envelope goes out. The dialogue
context travels in the envelope's session attributes and is only read and
written here. No turn is allowed to fail: anything unexpected is logged and
answered with an apology.
"""

from __future__ import annotations

import logging

from . import metrics, responses
from .dialogue.context import DialogueContext, Reply
from .dialogue.controller import DialogueController
from .dialogue.events import parse_event
from .errors import ErrorCategory, YaadRakhnaError
from .storage.items import ItemStore

logger = logging.getLogger(__name__)

RESPONSE_VERSION = "1.0"


def build_response(reply: Reply, attributes: dict | None = None) -> dict:
    response: dict = {"shouldEndSession": reply.end_session}
    if reply.speech:
        response["outputSpeech"] = {"type": "PlainText", "text": reply.speech}
    if reply.reprompt:
        response["reprompt"] = {
            "outputSpeech": {"type": "PlainText", "text": reply.reprompt}
        }
    return {
        "version": RESPONSE_VERSION,
        "sessionAttributes": attributes or {},
        "response": response,
    }


class Skill:
    def __init__(self, controller: DialogueController) -> None:
        self.controller = controller

    @property
    def store(self) -> ItemStore:
        return self.controller.store

    async def handle(self, envelope: dict) -> dict:
        metrics.turns_total.inc()
        attributes: dict = {}
        try:
            event = parse_event(envelope)
            attributes = (envelope.get("session") or {}).get("attributes") or {}
            context = DialogueContext.from_attributes(
                event.conversation_id, event.user_id, attributes
            )
            with metrics.timed(metrics.turn_latency_ms) as watch:
                result = await self.controller.handle(context, event)
            if result.reply.end_session:
                self.store.end_session(event.conversation_id)
            logger.info(
                "turn",
                extra={
                    "event_type": "turn",
                    "conversation_id": event.conversation_id,
                    "user_id": event.user_id,
                    "intent": event.name,
                    "state": result.context.state.value,
                    "latency_ms": watch.elapsed_ms,
                },
            )
            return build_response(result.reply, result.context.to_attributes(attributes))
        except Exception as exc:
            metrics.turn_errors_total.inc()
            category = (
                exc.category if isinstance(exc, YaadRakhnaError) else ErrorCategory.INTERNAL
            )
            logger.error(
                "turn_failed",
                exc_info=True,
                extra={"event_type": "turn_failed", "error_category": category.value},
            )
            reply = Reply(responses.APOLOGY, reprompt=responses.APOLOGY)
            return build_response(reply, attributes)
