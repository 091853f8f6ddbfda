from __future__ import annotations

import logging

from .. import metrics, responses
from ..responses import ResponseComposer
from ..storage.items import ItemStore
from .context import ConversationState, DialogueContext, Reply, TurnResult
from .dispatcher import Dispatcher
from .events import ITEM_LOCATION_SLOT, ITEM_NAME_SLOT, EventKind, TurnEvent

logger = logging.getLogger(__name__)

# Kinds taken as the awaited slot value while a flow is collecting input.
SLOT_FILLING_KINDS = frozenset(
    {EventKind.ITEM_NAME, EventKind.ITEM_LOCATION, EventKind.FALLBACK, EventKind.UNKNOWN}
)


class DialogueController:
    """Sequences the store and retrieve flows.

    ``handle`` consumes one event against the given context and returns the
    next context with the reply. At most one state transition happens per turn.
    """

    def __init__(self, store: ItemStore, composer: ResponseComposer | None = None) -> None:
        self.store = store
        self.composer = composer or ResponseComposer(store.vocabulary)
        self.dispatcher = Dispatcher(default=self._reflect)
        self.dispatcher.on(EventKind.LAUNCH, self._launch)
        self.dispatcher.on(EventKind.SESSION_ENDED, self._session_ended)
        self.dispatcher.on(EventKind.STORE_ITEM, self._start_store)
        self.dispatcher.on(EventKind.RETRIEVE_ITEM, self._start_retrieve)
        self.dispatcher.on(EventKind.DIRECT_STORE, self._direct_store)
        self.dispatcher.on(EventKind.DIRECT_RETRIEVE, self._direct_retrieve)
        self.dispatcher.on(EventKind.LIST_ITEMS, self._list_items)
        self.dispatcher.on(EventKind.CLEAR_ITEMS, self._clear_items)
        self.dispatcher.on(EventKind.HELP, self._help)
        self.dispatcher.on(EventKind.STOP, self._stop)
        self.dispatcher.on(EventKind.FALLBACK, self._fallback)
        self.dispatcher.on(EventKind.SYSTEM, self._system)

    async def handle(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        logger.debug(
            "turn_event",
            extra={
                "event_type": "turn_event",
                "conversation_id": context.conversation_id,
                "intent": event.name,
                "state": context.state.value,
            },
        )
        if context.state is not ConversationState.IDLE and event.kind in SLOT_FILLING_KINDS:
            return await self._fill_slot(context, event)
        return await self.dispatcher.dispatch(context, event)

    # Collecting states -----------------------------------------------------

    async def _fill_slot(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        if context.state is ConversationState.COLLECTING_ITEM_NAME:
            item = event.first_value(ITEM_NAME_SLOT) or responses.ITEM_PLACEHOLDER
            prompt = self.composer.ask_location(item)
            return TurnResult(
                context.advance(ConversationState.COLLECTING_ITEM_LOCATION, pending_item=item),
                Reply(prompt, reprompt=prompt),
            )

        if context.state is ConversationState.COLLECTING_ITEM_LOCATION:
            item = context.pending_item or responses.ITEM_PLACEHOLDER
            location = event.first_value(ITEM_LOCATION_SLOT) or responses.LOCATION_PLACEHOLDER
            return await self._remember(context, item, location)

        item = event.first_value(ITEM_NAME_SLOT) or responses.ITEM_PLACEHOLDER
        return await self._recall(context, item)

    # Flows -----------------------------------------------------------------

    async def _remember(self, context: DialogueContext, item: str, location: str) -> TurnResult:
        await self.store.store(context.conversation_id, context.user_id, item, location)
        return TurnResult(context.reset(), Reply(self.composer.stored(item, location)))

    async def _recall(self, context: DialogueContext, item: str) -> TurnResult:
        location = await self.store.retrieve(context.conversation_id, context.user_id, item)
        if location is None:
            speech = self.composer.not_found(item)
        else:
            speech = self.composer.found(item, location)
        return TurnResult(context.reset(), Reply(speech))

    async def _start_store(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        prompt = responses.ASK_ITEM_TO_STORE
        return TurnResult(
            context.advance(ConversationState.COLLECTING_ITEM_NAME), Reply(prompt, reprompt=prompt)
        )

    async def _start_retrieve(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        prompt = responses.ASK_ITEM_TO_RETRIEVE
        return TurnResult(
            context.advance(ConversationState.COLLECTING_ITEM_TO_RETRIEVE),
            Reply(prompt, reprompt=prompt),
        )

    async def _direct_store(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        item = event.slot(ITEM_NAME_SLOT) or responses.DIRECT_ITEM_PLACEHOLDER
        location = event.slot(ITEM_LOCATION_SLOT) or responses.LOCATION_PLACEHOLDER
        return await self._remember(context, item, location)

    async def _direct_retrieve(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        item = event.slot(ITEM_NAME_SLOT)
        if not item:
            logger.info(
                "direct_retrieve_without_item",
                extra={"event_type": "direct_retrieve_without_item", "intent": event.name},
            )
            return TurnResult(
                context.advance(ConversationState.COLLECTING_ITEM_TO_RETRIEVE),
                Reply(responses.ITEM_UNCLEAR, reprompt=responses.ASK_LOOKING_FOR),
            )
        return await self._recall(context, item)

    async def _list_items(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        items = await self.store.list_all(context.conversation_id, context.user_id)
        return TurnResult(context.reset(), Reply(self.composer.listing(items)))

    async def _clear_items(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        await self.store.clear_all(context.conversation_id, context.user_id)
        return TurnResult(context.reset(), Reply(responses.ALL_CLEARED))

    # Housekeeping ----------------------------------------------------------

    async def _launch(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        return TurnResult(context.reset(), Reply(responses.WELCOME, reprompt=responses.WELCOME))

    async def _help(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        return TurnResult(context, Reply(responses.HELP, reprompt=responses.HELP))

    async def _stop(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        return TurnResult(context.reset(), Reply(responses.GOODBYE, end_session=True))

    async def _fallback(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        return TurnResult(
            context.reset(), Reply(responses.NOT_UNDERSTOOD, reprompt=responses.NOT_UNDERSTOOD)
        )

    async def _session_ended(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        return TurnResult(context.reset(), Reply("", end_session=True))

    async def _system(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        # Platform notifications carry no user input; the flow in progress stays as it is.
        logger.info(
            "system_request",
            extra={"event_type": "system_request", "intent": event.name, "state": context.state.value},
        )
        return TurnResult(context, Reply(""))

    async def _reflect(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        metrics.unhandled_events_total.inc()
        logger.info(
            "unhandled_event",
            extra={"event_type": "unhandled_event", "intent": event.name},
        )
        return TurnResult(context, Reply(self.composer.reflect(event.name)))
