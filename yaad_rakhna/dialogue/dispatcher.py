from __future__ import annotations

from collections.abc import Awaitable, Callable

from .context import DialogueContext, TurnResult
from .events import EventKind, TurnEvent

TurnHandler = Callable[[DialogueContext, TurnEvent], Awaitable[TurnResult]]


class Dispatcher:
    """Minimal async dispatcher over the closed set of :class:`EventKind`.

    Handlers can be registered either as a decorator::

        dispatcher = Dispatcher(default=reflect)


        @dispatcher.on(EventKind.HELP)
        async def help_(context, event): ...

    or called directly::

        dispatcher.on(EventKind.HELP, help_)

    Kinds without a handler go to ``default``.
    """

    def __init__(self, default: TurnHandler) -> None:
        self._handlers: dict[EventKind, TurnHandler] = {}
        self._default = default

    def on(
        self, kind: EventKind, handler: TurnHandler | None = None
    ) -> TurnHandler | Callable[[TurnHandler], TurnHandler]:
        if handler is not None:
            self._handlers[kind] = handler
            return handler

        def decorator(func: TurnHandler) -> TurnHandler:
            self._handlers[kind] = func
            return func

        return decorator

    async def dispatch(self, context: DialogueContext, event: TurnEvent) -> TurnResult:
        handler = self._handlers.get(event.kind, self._default)
        return await handler(context, event)
