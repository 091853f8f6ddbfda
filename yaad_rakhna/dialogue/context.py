from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

STATE_KEY = "conversationState"
PENDING_KEY = "currentItemName"


class ConversationState(str, Enum):
    IDLE = "IDLE"
    COLLECTING_ITEM_NAME = "COLLECTING_ITEM_NAME"
    COLLECTING_ITEM_LOCATION = "COLLECTING_ITEM_LOCATION"
    COLLECTING_ITEM_TO_RETRIEVE = "COLLECTING_ITEM_TO_RETRIEVE"


@dataclass(frozen=True)
class DialogueContext:
    """Where one conversation stands between turns.

    The controller never mutates a context; it returns a new one. Only the
    skill edge translates it to and from the platform's session attributes.
    """

    conversation_id: str
    user_id: str
    state: ConversationState = ConversationState.IDLE
    pending_item: str | None = None

    def advance(
        self, state: ConversationState, pending_item: str | None = None
    ) -> DialogueContext:
        return replace(self, state=state, pending_item=pending_item)

    def reset(self) -> DialogueContext:
        return self.advance(ConversationState.IDLE)

    @classmethod
    def from_attributes(
        cls, conversation_id: str, user_id: str, attributes: dict | None
    ) -> DialogueContext:
        attributes = attributes or {}
        try:
            state = ConversationState(attributes.get(STATE_KEY) or ConversationState.IDLE)
        except ValueError:
            state = ConversationState.IDLE
        pending = attributes.get(PENDING_KEY)
        return cls(
            conversation_id=conversation_id,
            user_id=user_id,
            state=state,
            pending_item=pending if isinstance(pending, str) else None,
        )

    def to_attributes(self, attributes: dict | None = None) -> dict:
        """Return a copy of ``attributes`` carrying this context (IDLE is absence)."""

        out = {
            k: v for k, v in (attributes or {}).items() if k not in {STATE_KEY, PENDING_KEY}
        }
        if self.state is not ConversationState.IDLE:
            out[STATE_KEY] = self.state.value
        if self.pending_item is not None:
            out[PENDING_KEY] = self.pending_item
        return out


@dataclass(frozen=True)
class Reply:
    speech: str
    reprompt: str | None = None
    end_session: bool = False


@dataclass(frozen=True)
class TurnResult:
    context: DialogueContext
    reply: Reply
