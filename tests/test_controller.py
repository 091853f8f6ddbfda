import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from yaad_rakhna import responses
from yaad_rakhna.dialogue.context import ConversationState, DialogueContext
from yaad_rakhna.dialogue.controller import DialogueController
from yaad_rakhna.dialogue.events import EventKind, TurnEvent
from yaad_rakhna.storage.backends import MemoryBackend
from yaad_rakhna.storage.items import ItemStore
from tests.fakes.backends import UnavailableBackend


def event(kind, name="Intent", slots=None, raw=None):
    return TurnEvent(
        kind=kind,
        name=name,
        conversation_id="c1",
        user_id="u1",
        slots=slots or {},
        raw_value=raw,
    )


def idle():
    return DialogueContext(conversation_id="c1", user_id="u1")


def test_multi_turn_store_flow():
    async def main():
        store = ItemStore(MemoryBackend())
        controller = DialogueController(store)

        first = await controller.handle(idle(), event(EventKind.STORE_ITEM))
        assert first.context.state is ConversationState.COLLECTING_ITEM_NAME
        assert first.reply.speech == responses.ASK_ITEM_TO_STORE
        assert first.reply.reprompt == responses.ASK_ITEM_TO_STORE

        second = await controller.handle(
            first.context, event(EventKind.ITEM_NAME, slots={"ItemName": "चाबी"})
        )
        assert second.context.state is ConversationState.COLLECTING_ITEM_LOCATION
        assert second.context.pending_item == "चाबी"
        assert "चाबी" in second.reply.speech

        third = await controller.handle(
            second.context, event(EventKind.ITEM_LOCATION, slots={"ItemLocation": "दराज़"})
        )
        assert third.context.state is ConversationState.IDLE
        assert third.context.pending_item is None
        assert store.ephemeral("c1")["चाबी"] == "दराज़"
        assert "चाबी" in third.reply.speech and "दराज़" in third.reply.speech

    asyncio.run(main())


def test_contexts_are_not_mutated():
    async def main():
        controller = DialogueController(ItemStore(None))
        before = idle()
        result = await controller.handle(before, event(EventKind.STORE_ITEM))
        assert before.state is ConversationState.IDLE
        assert result.context is not before

    asyncio.run(main())


def test_multi_turn_retrieve_flow():
    async def main():
        store = ItemStore(MemoryBackend())
        await store.store("c1", "u1", "चश्मा", "बैग")
        controller = DialogueController(store)

        first = await controller.handle(idle(), event(EventKind.RETRIEVE_ITEM))
        assert first.context.state is ConversationState.COLLECTING_ITEM_TO_RETRIEVE
        assert first.reply.speech == responses.ASK_ITEM_TO_RETRIEVE

        second = await controller.handle(
            first.context, event(EventKind.ITEM_NAME, slots={"ItemName": "मेरा चश्मा"})
        )
        assert second.context.state is ConversationState.IDLE
        assert second.reply.speech == "आपने मेरा चश्मा बैग में रखा था।"

    asyncio.run(main())


def test_retrieve_miss_says_dont_know():
    async def main():
        controller = DialogueController(ItemStore(MemoryBackend()))
        result = await controller.handle(
            idle(), event(EventKind.DIRECT_RETRIEVE, slots={"ItemName": "अज्ञातवस्तु"})
        )
        assert result.context.state is ConversationState.IDLE
        assert result.reply.speech == responses.ResponseComposer().not_found("अज्ञातवस्तु")

    asyncio.run(main())


def test_direct_store_and_retrieve_use_gendered_verbs():
    async def main():
        controller = DialogueController(ItemStore(MemoryBackend()))
        stored = await controller.handle(
            idle(),
            event(EventKind.DIRECT_STORE, slots={"ItemName": "चाबी", "ItemLocation": "दराज़"}),
        )
        assert stored.context.state is ConversationState.IDLE
        assert stored.reply.speech == "ठीक है, मैंने याद कर लिया है कि चाबी दराज़ में रखी है।"

        found = await controller.handle(
            idle(), event(EventKind.DIRECT_RETRIEVE, slots={"ItemName": "मेरी चाबी"})
        )
        assert found.reply.speech == "आपने मेरी चाबी दराज़ में रखी थी।"

        await controller.handle(
            idle(),
            event(EventKind.DIRECT_STORE, slots={"ItemName": "चश्मा", "ItemLocation": "बैग"}),
        )
        found = await controller.handle(
            idle(), event(EventKind.DIRECT_RETRIEVE, slots={"ItemName": "चश्मा"})
        )
        assert found.reply.speech == "आपने चश्मा बैग में रखा था।"

    asyncio.run(main())


def test_direct_store_substitutes_placeholders():
    async def main():
        store = ItemStore(None)
        controller = DialogueController(store)
        result = await controller.handle(idle(), event(EventKind.DIRECT_STORE))
        assert store.ephemeral("c1") == {
            responses.DIRECT_ITEM_PLACEHOLDER: responses.LOCATION_PLACEHOLDER
        }
        assert responses.DIRECT_ITEM_PLACEHOLDER in result.reply.speech

    asyncio.run(main())


def test_direct_retrieve_without_item_asks_and_waits():
    async def main():
        controller = DialogueController(ItemStore(None))
        result = await controller.handle(idle(), event(EventKind.DIRECT_RETRIEVE))
        assert result.reply.speech == responses.ITEM_UNCLEAR
        assert result.reply.reprompt == responses.ASK_LOOKING_FOR
        assert result.context.state is ConversationState.COLLECTING_ITEM_TO_RETRIEVE

    asyncio.run(main())


def test_fallback_is_accepted_as_slot_value_while_collecting():
    async def main():
        store = ItemStore(None)
        controller = DialogueController(store)
        waiting = idle().advance(ConversationState.COLLECTING_ITEM_NAME)

        named = await controller.handle(waiting, event(EventKind.FALLBACK, raw="छाता"))
        assert named.context.pending_item == "छाता"

        placed = await controller.handle(
            named.context, event(EventKind.UNKNOWN, name="WeirdIntent", slots={"Foo": "दरवाज़ा"})
        )
        assert placed.context.state is ConversationState.IDLE
        assert store.ephemeral("c1") == {"छाता": "दरवाज़ा"}

    asyncio.run(main())


def test_unusable_input_gets_placeholders():
    async def main():
        store = ItemStore(None)
        controller = DialogueController(store)
        waiting = idle().advance(ConversationState.COLLECTING_ITEM_NAME)

        named = await controller.handle(waiting, event(EventKind.FALLBACK))
        assert named.context.pending_item == responses.ITEM_PLACEHOLDER

        placed = await controller.handle(named.context, event(EventKind.ITEM_LOCATION))
        assert store.ephemeral("c1") == {responses.ITEM_PLACEHOLDER: responses.LOCATION_PLACEHOLDER}
        assert placed.context.state is ConversationState.IDLE

        asking = idle().advance(ConversationState.COLLECTING_ITEM_TO_RETRIEVE)
        recalled = await controller.handle(asking, event(EventKind.ITEM_NAME))
        assert recalled.context.state is ConversationState.IDLE
        assert recalled.reply.speech

    asyncio.run(main())


def test_help_keeps_state_and_stop_resets_it():
    async def main():
        controller = DialogueController(ItemStore(None))
        waiting = idle().advance(ConversationState.COLLECTING_ITEM_LOCATION, pending_item="चाबी")

        helped = await controller.handle(waiting, event(EventKind.HELP))
        assert helped.context == waiting
        assert helped.reply.speech == responses.HELP

        stopped = await controller.handle(waiting, event(EventKind.STOP))
        assert stopped.context.state is ConversationState.IDLE
        assert stopped.reply.end_session

    asyncio.run(main())


def test_unknown_intent_in_idle_is_reflected():
    async def main():
        controller = DialogueController(ItemStore(None))
        result = await controller.handle(idle(), event(EventKind.UNKNOWN, name="WeatherIntent"))
        assert result.reply.speech == "आपने WeatherIntent इंटेंट ट्रिगर किया है"
        assert result.context == idle()

    asyncio.run(main())


def test_list_and_clear_items():
    async def main():
        store = ItemStore(MemoryBackend())
        controller = DialogueController(store)
        empty = await controller.handle(idle(), event(EventKind.LIST_ITEMS))
        assert empty.reply.speech == responses.NOTHING_REMEMBERED

        await store.store("c1", "u1", "चाबी", "दराज़")
        listed = await controller.handle(idle(), event(EventKind.LIST_ITEMS))
        assert "चाबी दराज़ में" in listed.reply.speech

        cleared = await controller.handle(idle(), event(EventKind.CLEAR_ITEMS))
        assert cleared.reply.speech == responses.ALL_CLEARED
        assert await store.list_all("c1", "u1") == {}

    asyncio.run(main())


def test_store_flow_succeeds_with_unavailable_durable_tier():
    async def main():
        store = ItemStore(UnavailableBackend())
        controller = DialogueController(store)
        stored = await controller.handle(
            idle(),
            event(EventKind.DIRECT_STORE, slots={"ItemName": "चाबी", "ItemLocation": "दराज़"}),
        )
        found = await controller.handle(
            stored.context, event(EventKind.DIRECT_RETRIEVE, slots={"ItemName": "चाबी"})
        )
        assert found.reply.speech == "आपने चाबी दराज़ में रखी थी।"

    asyncio.run(main())
