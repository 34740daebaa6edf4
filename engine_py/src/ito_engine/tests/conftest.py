"""Shared fixtures: an engine wired to a recording transport and hand-fired timers."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from ito_engine.constants import EVENT_UPDATE_GAMESTATE
from ito_engine.engine import ItoEngine
from ito_engine.themes import RandomThemeSource


class RecordingTransport:
    def __init__(self):
        self.sent: List[Tuple[str, str, Dict[str, Any]]] = []

    def send_to(self, connection_id: str, event: str, payload: Dict[str, Any]):
        self.sent.append((connection_id, event, payload))

    def events_for(self, connection_id: str, event: Optional[str] = None):
        return [
            (e, payload) for cid, e, payload in self.sent
            if cid == connection_id and (event is None or e == event)
        ]

    def last_state(self, connection_id: str) -> Optional[Dict[str, Any]]:
        states = self.events_for(connection_id, EVENT_UPDATE_GAMESTATE)
        return states[-1][1] if states else None

    def clear(self):
        self.sent.clear()


class ManualTimer:
    """Timer that only fires when the test says so."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Fires even if cancelled, to model a timer racing its cancellation
        self.callback()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def timers():
    return []


@pytest.fixture
def engine(transport, timers):
    def factory(delay, callback):
        timer = ManualTimer(delay, callback)
        timers.append(timer)
        return timer

    return ItoEngine(
        transport,
        theme_source=RandomThemeSource(["Only theme"], seed=1),
        timer_factory=factory,
    )


@pytest.fixture
def seat(engine):
    """Join each name on its own connection (c1, c2, ...) and return the connection ids."""
    def _seat(room_id, *names):
        connection_ids = []
        for i, name in enumerate(names, start=1):
            connection_id = f"c{i}"
            engine.join_room(room_id, connection_id, name)
            connection_ids.append(connection_id)
        return connection_ids

    return _seat
