"""Shared pytest fixtures and test helpers for celcat tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from typing import Any

import pytest
import requests
import structlog

BASE_URL = "https://celcat.test/calendar"

LOGIN_PAGE = """
<form action="/calendar/LdapLogin/Logon" method="post">
  <input name="__RequestVerificationToken" type="hidden" value="CfDJ8token-123" />
  <input id="Name" name="Name" type="text" value="" />
</form>
"""


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, text: str = "", status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code

    @classmethod
    def json_body(cls, body: Any, status_code: int = 200) -> "FakeResponse":
        return cls(json.dumps(body), status_code)

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stand-in for requests.Session that replays queued responses.

    Queue either a FakeResponse or an exception per expected call; each call
    is recorded as (method, url, data).
    """

    def __init__(self, *responses: FakeResponse | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, Any]] = []
        self.closed = False

    def _next(self, method: str, url: str, data: Any = None) -> FakeResponse:
        self.calls.append((method, url, data))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url)

    def post(self, url: str, data: Any = None, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, data)

    def close(self) -> None:
        self.closed = True


def element(label: str | None, entity_type: int, federation_id: str | None = None, **extra: Any) -> dict[str, Any]:
    """A side bar element as the service sends it."""
    entry = {
        "label": label,
        "content": extra.pop("content", None),
        "federationId": federation_id,
        "entityType": entity_type,
        "assignmentContext": None,
        "containsHyperlinks": False,
        "isNotes": False,
        "isStudentSpecific": False,
    }
    entry.update(extra)
    return entry


@pytest.fixture
def side_bar_elements() -> list[dict[str, Any]]:
    """A mixed side bar where the second room continues the Salles block."""
    return [
        element("Time", 0, content="9/6/2021 8:30 AM-11:45 AM"),
        element("Catégorie", 0, content="TD"),
        element("Matière", 100, "DPGANG3D", content="Droit des affaires"),
        element("Salles", 102, "1172982", content="CHE2 Larousse haut"),
        element(None, 102, "1172981", content="CHE2 Condorcet"),
    ]


@pytest.fixture
def course_payload() -> dict[str, Any]:
    return {
        "id": "-1347128091:-662573064:1:42367:4",
        "start": "2021-09-22T14:30:00",
        "end": "2021-09-22T17:45:00",
        "allDay": False,
        "description": "Some description",
        "backgroundColor": "#FF0000",
        "textColor": "#ffffff",
        "department": "1 : UFR DROIT",
        "faculty": None,
        "eventCategory": "CM",
        "sites": ["CHENES"],
        "modules": ["1BAIJU1M"],
        "registerStatus": 2,
        "studentMark": 0,
        "custom1": None,
        "custom2": None,
        "custom3": None,
    }


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None, None, None]:
    """Restore structlog and root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    structlog.reset_defaults()
    root.handlers = original_handlers
    root.setLevel(original_level)
