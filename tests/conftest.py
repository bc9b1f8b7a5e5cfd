"""Shared fixtures for timehunt tests.

- TZ: a fixed +09:00 zone so results never depend on the machine's clock
- make_event: builds CalendarEvent values from "YYYY-MM-DD HH:MM" strings
- FakeGateway: in-memory stand-in for gcal.CalendarGateway
- ScriptedPrompt: answers confirmation questions from a list
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from event_groups import CalendarEvent
from gcal import AuthorizationError, TransportError

TZ = timezone(timedelta(hours=9))


def at(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%d %H:%M").replace(tzinfo=TZ)


# ─────────────────────────────────────────────────────────────────────────────
# Event Builders
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def make_event():
    def _make(name: str, start: str, end: str, event_id: str = "") -> CalendarEvent:
        if len(start) == 10:
            return CalendarEvent(name, date.fromisoformat(start), date.fromisoformat(end), event_id)
        return CalendarEvent(name, at(start), at(end), event_id)
    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeGateway:
    """Records every call.

    ``auth_failures`` makes the first N get_events calls fail, ``create_auth_failures``
    the first N create_event calls, ``transport_failures`` the first N get_events calls
    with a TransportError.
    """

    def __init__(self, events=None, auth_failures: int = 0, create_auth_failures: int = 0,
                 transport_failures: int = 0):
        self.events        = list(events or [])
        self.auth_failures = auth_failures
        self.create_auth_failures = create_auth_failures
        self.transport_failures   = transport_failures
        self.calls         = []
        self.created       = []

    def get_events(self, name):
        self.calls.append(("get", name))
        if self.auth_failures > 0:
            self.auth_failures -= 1
            raise AuthorizationError("token expired")
        if self.transport_failures > 0:
            self.transport_failures -= 1
            raise TransportError("503 backend error")
        return [e for e in self.events if name in e.name]

    def delete_events(self, name):
        self.calls.append(("delete", name))
        self.events = [e for e in self.events if name not in e.name]

    def create_event(self, name, date_range):
        self.calls.append(("create", name))
        if self.create_auth_failures > 0:
            self.create_auth_failures -= 1
            raise AuthorizationError("token expired")
        self.created.append((name, date_range))
        return {"summary": name}

    @property
    def mutated(self) -> bool:
        return any(kind in ("delete", "create") for kind, _ in self.calls)


class ScriptedPrompt:
    def __init__(self, *answers):
        self.answers   = list(answers)
        self.questions = []

    def ask(self, question):
        self.questions.append(question)
        return self.answers.pop(0)


@pytest.fixture
def fake_gateway_cls():
    return FakeGateway


@pytest.fixture
def prompt_cls():
    return ScriptedPrompt
