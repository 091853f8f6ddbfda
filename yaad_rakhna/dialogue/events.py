"""Turn events and their parsing from platform request envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import MalformedEvent

ITEM_NAME_SLOT = "ItemName"
ITEM_LOCATION_SLOT = "ItemLocation"
RAW_VALUE_SLOT = "rawValue"


class EventKind(str, Enum):
    LAUNCH = "launch"
    SESSION_ENDED = "session_ended"
    STORE_ITEM = "store_item"
    ITEM_NAME = "item_name"
    ITEM_LOCATION = "item_location"
    RETRIEVE_ITEM = "retrieve_item"
    DIRECT_STORE = "direct_store"
    DIRECT_RETRIEVE = "direct_retrieve"
    LIST_ITEMS = "list_items"
    CLEAR_ITEMS = "clear_items"
    HELP = "help"
    STOP = "stop"
    FALLBACK = "fallback"
    UNKNOWN = "unknown"
    SYSTEM = "system"


INTENT_KINDS: dict[str, EventKind] = {
    "StoreItemIntent": EventKind.STORE_ITEM,
    "ItemNameIntent": EventKind.ITEM_NAME,
    "ItemLocationIntent": EventKind.ITEM_LOCATION,
    "RetrieveItemIntent": EventKind.RETRIEVE_ITEM,
    "DirectStoreIntent": EventKind.DIRECT_STORE,
    "DirectRetrieveIntent": EventKind.DIRECT_RETRIEVE,
    "ListItemsIntent": EventKind.LIST_ITEMS,
    "ClearItemsIntent": EventKind.CLEAR_ITEMS,
    "AMAZON.HelpIntent": EventKind.HELP,
    "AMAZON.CancelIntent": EventKind.STOP,
    "AMAZON.StopIntent": EventKind.STOP,
    "AMAZON.FallbackIntent": EventKind.FALLBACK,
}

REQUEST_KINDS: dict[str, EventKind] = {
    "LaunchRequest": EventKind.LAUNCH,
    "SessionEndedRequest": EventKind.SESSION_ENDED,
}


@dataclass(frozen=True)
class TurnEvent:
    kind: EventKind
    name: str
    conversation_id: str
    user_id: str
    slots: dict[str, str] = field(default_factory=dict)
    raw_value: str | None = None

    def slot(self, name: str) -> str | None:
        return self.slots.get(name)

    def first_value(self, preferred: str) -> str | None:
        """Best available value: ``preferred`` slot, any other slot, then the raw utterance."""

        value = self.slot(preferred)
        if value:
            return value
        for other in self.slots.values():
            if other:
                return other
        return self.raw_value or None


def _slot_value(slot: Any) -> str | None:
    if isinstance(slot, dict):
        slot = slot.get("value")
    if isinstance(slot, str) and slot.strip():
        return slot.strip()
    return None


def parse_event(envelope: dict) -> TurnEvent:
    """Turn a platform request envelope into a :class:`TurnEvent`.

    Raises :class:`MalformedEvent` when the envelope has no request type.
    """

    if not isinstance(envelope, dict):
        raise MalformedEvent("envelope is not a mapping")
    request = envelope.get("request") or {}
    request_type = request.get("type")
    if not request_type:
        raise MalformedEvent("request has no type")

    session = envelope.get("session") or {}
    user = session.get("user") or (envelope.get("context") or {}).get("System", {}).get("user") or {}
    conversation_id = session.get("sessionId") or ""
    user_id = user.get("userId") or ""

    if request_type != "IntentRequest":
        return TurnEvent(
            kind=REQUEST_KINDS.get(request_type, EventKind.SYSTEM),
            name=request_type,
            conversation_id=conversation_id,
            user_id=user_id,
        )

    intent = request.get("intent") or {}
    name = intent.get("name") or ""
    raw_slots = intent.get("slots") or {}
    slots: dict[str, str] = {}
    for slot_name, slot in raw_slots.items():
        if slot_name == RAW_VALUE_SLOT:
            continue
        value = _slot_value(slot)
        if value is not None:
            slots[slot_name] = value
    return TurnEvent(
        kind=INTENT_KINDS.get(name, EventKind.UNKNOWN),
        name=name,
        conversation_id=conversation_id,
        user_id=user_id,
        slots=slots,
        raw_value=_slot_value(raw_slots.get(RAW_VALUE_SLOT)),
    )
