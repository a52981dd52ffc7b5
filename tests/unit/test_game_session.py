# pylint: disable=missing-module-docstring,missing-function-docstring

from typing import Any

from orchestrator.events import ChatReceived, Connected, Event, EventType, Faulted, Terminated
from protocol.game_client import MessageChannel, RawMessage
from session.connection_status import SessionPhase
from session.credentials import Credentials
from session.game_session import GameSession


CREDS = Credentials(username="Agent", host="mc.example.net", port=25565, version="1.20.4")


def record_all(session: GameSession) -> list[Event]:
    seen: list[Event] = []
    for event_type in EventType:
        session.subscribe(event_type, seen.append)
    return seen


def test_open_passes_credentials_to_client(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    session.open()

    assert fake_client.calls == [{
        "host": "mc.example.net",
        "port": 25565,
        "username": "Agent",
        "version": "1.20.4",
    }]
    assert session.phase is SessionPhase.CONNECTING


def test_connected_then_terminated(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()

    fake_client.last.spawn()
    assert session.phase is SessionPhase.ACTIVE
    assert session.username == "Agent"

    fake_client.last.end("socketClosed")
    assert session.phase is SessionPhase.TERMINATED

    assert [type(e) for e in seen] == [Connected, Terminated]
    assert isinstance(seen[1], Terminated)
    assert seen[1].reason == "socketClosed"
    assert all(e.session_id == session.session_id for e in seen)


def test_terminated_fires_exactly_once(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()

    handle = fake_client.last
    handle.spawn()
    handle.end("kicked")
    handle.end("socketClosed")
    handle.spawn()
    handle.error("late error")

    assert [e.event_type for e in seen] == [EventType.CONNECTED, EventType.TERMINATED]


def test_connected_fires_once(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()

    fake_client.last.spawn()
    fake_client.last.spawn()

    assert [e.event_type for e in seen] == [EventType.CONNECTED]


def test_connect_failure_faults_and_terminates_without_raising(fake_client: Any, logged: list[dict[str, Any]]):
    fake_client.fail = True
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)

    session.open()

    assert [type(e) for e in seen] == [Faulted, Terminated]
    assert session.phase is SessionPhase.TERMINATED
    assert any(r["event_type"] == "BOT_ERROR" for r in logged)


def test_terminated_before_connected_skips_connected(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()

    fake_client.last.error("ECONNREFUSED")
    fake_client.last.end(None)

    assert [e.event_type for e in seen] == [EventType.FAULTED, EventType.TERMINATED]


def test_only_real_chat_is_surfaced(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()
    handle = fake_client.last
    handle.spawn()

    handle.message(RawMessage(text="20/20❤", channel=MessageChannel.HUD))
    handle.message(RawMessage(text="150/150 Mana", channel=MessageChannel.CHAT, username="Steve"))
    handle.message(RawMessage(text="echo", channel=MessageChannel.CHAT, username="Agent"))
    handle.message(RawMessage(text="Server restart in 5m", channel=MessageChannel.SYSTEM))
    handle.message(RawMessage(text="hello bot", channel=MessageChannel.CHAT, username="Steve"))

    chats = [e for e in seen if isinstance(e, ChatReceived)]
    assert len(chats) == 1
    assert (chats[0].username, chats[0].text) == ("Steve", "hello bot")


def test_messages_before_spawn_are_ignored(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()

    fake_client.last.message(RawMessage(text="hi", channel=MessageChannel.CHAT, username="Steve"))

    assert seen == []


def test_close_asks_client_to_quit(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    seen = record_all(session)
    session.open()
    fake_client.last.spawn()

    session.close("shutdown")
    session.close("shutdown")

    assert fake_client.last.quit_reasons == ["shutdown"]
    assert seen[-1].event_type is EventType.TERMINATED


def test_listeners_run_in_registration_order(fake_client: Any):
    session = GameSession(credentials=CREDS, client=fake_client)
    order: list[str] = []
    session.subscribe(EventType.TERMINATED, lambda _e: order.append("first"))
    session.subscribe(EventType.TERMINATED, lambda _e: order.append("second"))
    session.open()

    fake_client.last.end()

    assert order == ["first", "second"]
