"""
Tests for inbound event parsing and the outbound envelope.
"""

import asyncio

import pytest

from ito_engine.ws.events import (
    JoinEvent,
    KickPlayerEvent,
    PlayCardEvent,
    SubmitRankingEvent,
    create_outbound_event,
    parse_inbound_event,
)
from ito_engine.ws import server
from ito_engine.ws.server import WebSocketTransport


def test_parse_join_with_aliases():
    event = parse_inbound_event({"type": "join_room", "roomId": "1234", "username": "Ann", "icon": "🐸"})

    assert isinstance(event, JoinEvent)
    assert event.room_id == "1234"
    assert event.username == "Ann"
    assert event.icon == "🐸"
    assert event.reconnect is False


def test_parse_reconnect_flag():
    event = parse_inbound_event({"type": "join_room", "roomId": "1", "username": "Ann", "reconnect": True})
    assert event.reconnect is True
    assert event.icon is None


def test_parse_kick_and_ranking():
    kick = parse_inbound_event({"type": "kick_player", "roomId": "1", "playerId": "abc"})
    ranking = parse_inbound_event({"type": "submit_ranking", "roomId": "1", "ranking": {"a": 1, "b": 2}})
    card = parse_inbound_event({"type": "play_card", "roomId": "1", "card": 42})

    assert isinstance(kick, KickPlayerEvent)
    assert kick.player_id == "abc"
    assert isinstance(ranking, SubmitRankingEvent)
    assert ranking.ranking == {"a": 1, "b": 2}
    assert isinstance(card, PlayCardEvent)
    assert card.card == 42


@pytest.mark.parametrize("data", [
    [],
    {},
    {"type": "fold", "roomId": "1"},
    {"type": "start_game"},
    {"type": "join_room", "roomId": "1"},
    {"type": "join_room", "roomId": "1", "username": ""},
    {"type": "submit_comment", "roomId": "1", "comment": "x" * 201},
    {"type": "play_card", "roomId": "1", "card": "high"},
])
def test_malformed_events_rejected(data):
    with pytest.raises(ValueError):
        parse_inbound_event(data)


def test_outbound_envelopes():
    assert create_outbound_event("update_gamestate", {"phase": "lobby"}) == {
        "type": "update_gamestate",
        "state": {"phase": "lobby"},
    }
    assert create_outbound_event("kicked", {}) == {"type": "kicked"}


@pytest.mark.asyncio
async def test_transport_queues_per_connection():
    transport = WebSocketTransport()
    queue = transport.register("c1")

    transport.send_to("c1", "kicked", {})
    transport.send_to("c2", "kicked", {})
    message = await asyncio.wait_for(queue.get(), timeout=1)

    assert message == {"type": "kicked"}
    assert queue.empty()
    assert len(transport) == 1

    transport.unregister("c1")
    transport.send_to("c1", "kicked", {})
    await asyncio.sleep(0)
    assert queue.empty()
    assert len(transport) == 0


@pytest.mark.asyncio
async def test_transport_accepts_sends_from_other_threads():
    transport = WebSocketTransport()
    queue = transport.register("c1")

    await asyncio.to_thread(transport.send_to, "c1", "update_gamestate", {"phase": "lobby"})
    message = await asyncio.wait_for(queue.get(), timeout=1)

    assert message == {"type": "update_gamestate", "state": {"phase": "lobby"}}


class BrokenSocket:
    async def send_text(self, text):
        raise RuntimeError("socket closed")


@pytest.mark.asyncio
async def test_failed_send_unregisters_connection():
    queue = server.transport.register("broken")
    server.transport.send_to("broken", "kicked", {})

    await asyncio.wait_for(server._write_loop(BrokenSocket(), queue, "broken"), timeout=1)

    assert "broken" not in server.transport.connections
    server.transport.send_to("broken", "kicked", {})
    assert queue.empty()


@pytest.mark.asyncio
async def test_close_connection_waits_for_writer():
    server.transport.register("closing")
    started = asyncio.Event()

    async def idle_writer():
        started.set()
        await asyncio.Event().wait()

    writer = asyncio.create_task(idle_writer())
    await started.wait()

    await server._close_connection("closing", writer)

    assert writer.done()
    assert writer.cancelled()
    assert "closing" not in server.transport.connections
