from __future__ import annotations

import asyncio
import shlex
import uuid
from pathlib import Path

import typer

from .app import build_skill
from .config import Settings
from .logging import configure_logging
from .normalizer import normalize as normalize_name
from .storage.backends import build_backend
from .storage.items import ItemStore
from .vocabulary import load_vocabulary

app = typer.Typer(help="Yaad Rakhna item locator")

items_app = typer.Typer(help="Inspect durable items")
app.add_typer(items_app, name="items")

REQUEST_ALIASES = {
    "launch": "LaunchRequest",
    "end": "SessionEndedRequest",
}


def _settings(backend: str | None, path: Path | None) -> Settings:
    overrides: dict[str, object] = {}
    if backend is not None:
        overrides["durable_backend"] = backend
    if path is not None:
        overrides["durable_path"] = path
    return Settings(**overrides)


def build_envelope(
    line: str, conversation_id: str, user_id: str, attributes: dict
) -> dict | None:
    """Turn ``IntentName slot=value ...`` into a request envelope."""

    words = shlex.split(line)
    if not words:
        return None
    head, rest = words[0], words[1:]
    session = {
        "sessionId": conversation_id,
        "user": {"userId": user_id},
        "attributes": attributes,
    }
    if head.lower() in REQUEST_ALIASES:
        return {"session": session, "request": {"type": REQUEST_ALIASES[head.lower()]}}

    slots: dict[str, dict] = {}
    loose: list[str] = []
    for word in rest:
        name, sep, value = word.partition("=")
        if sep:
            slots[name] = {"name": name, "value": value}
        else:
            loose.append(word)
    if loose:
        slots["rawValue"] = {"value": " ".join(loose)}
    return {
        "session": session,
        "request": {"type": "IntentRequest", "intent": {"name": head, "slots": slots}},
    }


@app.command()
def run(
    user: str = typer.Option("cli-user", help="User id for the durable tier"),
    backend: str | None = typer.Option(None, help="Durable backend: none, memory, json, sqlite"),
    path: Path | None = typer.Option(None, help="File for the json or sqlite backend"),
    verbose: bool = typer.Option(False, help="Print effective settings"),
) -> None:
    """Run an interactive text session.

    Each line is ``IntentName slot=value ...``; ``launch`` and ``end`` send the
    launch and session-ended requests.
    """
    configure_logging("WARNING")
    settings = _settings(backend, path)
    if verbose:
        typer.echo(settings.model_dump_json(indent=2))
    skill = build_skill(settings)
    conversation_id = f"cli-{uuid.uuid4().hex[:8]}"

    async def main() -> None:
        attributes: dict = {}
        stdin = typer.get_text_stream("stdin")
        for line in stdin:
            envelope = build_envelope(line.strip(), conversation_id, user, attributes)
            if envelope is None:
                continue
            out = await skill.handle(envelope)
            attributes = out["sessionAttributes"]
            speech = out["response"].get("outputSpeech", {}).get("text")
            if speech:
                typer.echo(speech)
            if out["response"]["shouldEndSession"]:
                break
        skill.store.end_session(conversation_id)

    asyncio.run(main())


@app.command()
def normalize(
    name: str,
    vocabulary: Path | None = typer.Option(None, help="Vocabulary JSON file"),
) -> None:
    """Print the lookup key for an item name."""
    vocab = load_vocabulary(vocabulary) if vocabulary is not None else None
    typer.echo(normalize_name(name, vocab))


def _durable_store(backend: str | None, path: Path | None) -> ItemStore:
    durable = build_backend(_settings(backend, path))
    if durable is None:
        typer.echo("No durable storage configured", err=True)
        raise typer.Exit(code=1)
    return ItemStore(durable)


@items_app.command("list")
def list_items(
    user: str = typer.Option(..., help="User id"),
    backend: str | None = typer.Option(None, help="Durable backend"),
    path: Path | None = typer.Option(None, help="Backend file"),
) -> None:
    """Print the durable items of a user."""
    store = _durable_store(backend, path)
    items = asyncio.run(store.list_all("cli", user))
    if not items:
        typer.echo("No items")
        return
    for item, location in sorted(items.items()):
        typer.echo(f"{item}: {location}")


@items_app.command("clear")
def clear_items(
    user: str = typer.Option(..., help="User id"),
    backend: str | None = typer.Option(None, help="Durable backend"),
    path: Path | None = typer.Option(None, help="Backend file"),
) -> None:
    """Forget every durable item of a user."""
    store = _durable_store(backend, path)
    asyncio.run(store.clear_all("cli", user))
    typer.echo(f"Cleared items for {user}")


if __name__ == "__main__":  # pragma: no cover
    app()
