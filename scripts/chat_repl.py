"""Terminal chat client for a running relay.

Wires the client pieces together the way a UI would:
- turns are printed from a MessageStore subscription, never by the send loop itself
- the loading marker follows SendController state changes
- `/signout` ends the session (further input is ignored), `/quit` exits

The relay URL comes from RELAY_URL; the session token from CHAT_SESSION_TOKEN.
"""

# ruff: noqa: I001
# pyright: reportMissingImports=false
from __future__ import annotations

import asyncio
import os

from chat_relay.chat.schemas import Turn
from chat_relay.client.controller import SendController, SendState
from chat_relay.client.http_client import HttpRelayClient
from chat_relay.client.session import TokenSession
from chat_relay.client.store import MessageStore
from chat_relay.core.logging import setup_logging


def _render_turn(turn: Turn) -> None:
    label = "you" if turn.role == "user" else "assistant"
    print(f"[{label}] {turn.content}\n")


def _render_state(state: SendState) -> None:
    if state is SendState.SENDING:
        print("... waiting for reply")


async def run_repl(*, session: TokenSession) -> None:
    store = MessageStore()
    store.subscribe(_render_turn)
    controller = SendController(
        store=store,
        transport=HttpRelayClient.from_settings(),
        is_authenticated=session.is_authenticated,
    )
    controller.subscribe(_render_state)

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            return

        command = line.strip()
        if command == "/quit":
            return
        if command == "/signout":
            session.sign_out()
            print("Signed out.")
            continue

        accepted = await controller.submit(line)
        if not accepted and not session.is_authenticated():
            print("Not signed in; message ignored.")


def main() -> None:
    """Entry point."""
    session = TokenSession(os.getenv("CHAT_SESSION_TOKEN", "").strip() or None)
    if not session.is_authenticated():
        raise SystemExit("CHAT_SESSION_TOKEN is not set")

    setup_logging()
    asyncio.run(run_repl(session=session))


if __name__ == "__main__":
    main()
