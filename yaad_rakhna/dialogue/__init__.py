"""Multi-turn store/retrieve dialogue."""

from .context import ConversationState, DialogueContext, Reply, TurnResult
from .controller import DialogueController
from .events import EventKind, TurnEvent, parse_event

__all__ = [
    "ConversationState",
    "DialogueContext",
    "DialogueController",
    "EventKind",
    "Reply",
    "TurnEvent",
    "TurnResult",
    "parse_event",
]
