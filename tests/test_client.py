"""Tests for the Celcat HTTP client."""

from datetime import datetime
from typing import Any

import pytest
import requests

from celcat.client import Celcat, ClientState, extract_token
from celcat.entities import Kind, ResourceId
from celcat.errors import (
    DecodeError,
    TokenNotFoundError,
    TransportError,
    UnlabeledElementError,
)
from celcat.fetchable.calendar import CalendarData, CalendarDataRequest
from celcat.fetchable.event import ElementVariant, SideBarEvent, SideBarEventRequest
from celcat.fetchable.resources import ResourceList, ResourceListRequest
from tests.conftest import BASE_URL, LOGIN_PAGE, FakeResponse, FakeSession, element


def connected(*responses: FakeResponse | Exception) -> tuple[Celcat, FakeSession]:
    session = FakeSession(FakeResponse(LOGIN_PAGE), *responses)
    return Celcat.connect(BASE_URL, session=session), session


class TestExtractToken:
    def test_found(self) -> None:
        assert extract_token(LOGIN_PAGE) == "CfDJ8token-123"

    def test_missing(self) -> None:
        with pytest.raises(TokenNotFoundError):
            extract_token("<html><body>maintenance</body></html>")

    def test_empty_value_is_missing(self) -> None:
        with pytest.raises(TokenNotFoundError):
            extract_token('<input name="__RequestVerificationToken" value="" />')


class TestConnect:
    def test_fetches_token(self) -> None:
        celcat, session = connected()
        assert celcat.token == "CfDJ8token-123"
        assert celcat.state is ClientState.UNAUTHENTICATED
        assert session.calls == [("GET", f"{BASE_URL}/LdapLogin", None)]

    def test_trailing_slash_is_stripped(self) -> None:
        session = FakeSession(FakeResponse(LOGIN_PAGE))
        celcat = Celcat.connect(f"{BASE_URL}/", session=session)
        assert celcat.address == BASE_URL
        assert session.calls[0][1] == f"{BASE_URL}/LdapLogin"

    def test_token_not_found(self) -> None:
        session = FakeSession(FakeResponse("<html></html>"))
        with pytest.raises(TokenNotFoundError):
            Celcat.connect(BASE_URL, session=session)

    def test_transport_failure(self) -> None:
        cause = requests.ConnectionError("connection refused")
        session = FakeSession(cause)
        with pytest.raises(TransportError) as exc_info:
            Celcat.connect(BASE_URL, session=session)
        assert exc_info.value.__cause__ is cause

    def test_error_page_without_token(self) -> None:
        session = FakeSession(FakeResponse("<html>Service Unavailable</html>", status_code=503))
        with pytest.raises(TokenNotFoundError):
            Celcat.connect(BASE_URL, session=session)

    def test_error_status_with_token_still_connects(self) -> None:
        session = FakeSession(FakeResponse(LOGIN_PAGE, status_code=404))
        assert Celcat.connect(BASE_URL, session=session).token == "CfDJ8token-123"


class TestLogin:
    def test_posts_credentials_with_token(self) -> None:
        celcat, session = connected(FakeResponse("<html>welcome</html>"))
        celcat.login("jdoe", "s3cret")
        assert session.calls[1] == (
            "POST",
            f"{BASE_URL}/LdapLogin/Logon",
            {"Name": "jdoe", "Password": "s3cret", "__RequestVerificationToken": "CfDJ8token-123"},
        )
        assert celcat.state is ClientState.AUTHENTICATED
        assert celcat.authenticated

    def test_error_status_still_completes(self) -> None:
        celcat, _ = connected(FakeResponse("denied", status_code=401))
        celcat.login("jdoe", "wrong")
        assert celcat.state is ClientState.AUTHENTICATED

    def test_failure_leaves_client_unauthenticated(self) -> None:
        celcat, _ = connected(requests.Timeout("timed out"))
        with pytest.raises(TransportError, match="timed out"):
            celcat.login("jdoe", "s3cret")
        assert celcat.state is ClientState.UNAUTHENTICATED


class TestFetch:
    def test_side_bar_event(self, side_bar_elements: list[dict[str, Any]]) -> None:
        body = {"federationId": None, "entityType": 0, "elements": side_bar_elements}
        celcat, session = connected(FakeResponse.json_body(body))
        event = celcat.fetch(SideBarEvent, SideBarEventRequest(event_id="ev-1"))
        assert session.calls[1] == ("POST", f"{BASE_URL}/Home/GetSideBarEvent", {"eventId": "ev-1"})
        assert [e.variant for e in event.elements] == [
            ElementVariant.TIME,
            ElementVariant.CATEGORY,
            ElementVariant.MODULE,
            ElementVariant.ROOM,
            ElementVariant.ROOM,
        ]

    def test_calendar_data(self, course_payload: dict[str, Any]) -> None:
        celcat, session = connected(FakeResponse.json_body([course_payload]))
        request = CalendarDataRequest(
            start=datetime(2021, 9, 20),
            end=datetime(2021, 9, 27),
            res_type=Kind.STUDENT,
            federation_ids=ResourceId(Kind.STUDENT, "21900001"),
        )
        data = celcat.fetch(CalendarData, request)
        method, url, form = session.calls[1]
        assert url == f"{BASE_URL}/Home/GetCalendarData"
        assert form["federationIds"] == "21900001"
        assert form["resType"] == "104"
        assert data.courses[0].id.kind is Kind.COURSE

    def test_resource_list(self) -> None:
        body = {"total": 1, "results": [{"id": "g-1", "text": "L3 Droit", "dept": "UFR DROIT"}]}
        celcat, session = connected(FakeResponse.json_body(body))
        listing = celcat.fetch(ResourceList, ResourceListRequest(search_term="L3", res_type=Kind.GROUP))
        assert session.calls[1][1] == f"{BASE_URL}/Home/ReadResourceListItems"
        assert listing.results[0].id == ResourceId(Kind.GROUP, "g-1")

    def test_non_json_body_is_transport_error(self) -> None:
        celcat, _ = connected(FakeResponse("<html>session expired</html>"))
        with pytest.raises(TransportError, match="GetSideBarEvent"):
            celcat.fetch(SideBarEvent, SideBarEventRequest(event_id="ev-1"))

    def test_transport_failure(self) -> None:
        celcat, _ = connected(requests.ConnectionError("reset by peer"))
        with pytest.raises(TransportError, match="reset by peer"):
            celcat.fetch(SideBarEvent, SideBarEventRequest(event_id="ev-1"))

    def test_shape_mismatch_is_decode_error(self) -> None:
        celcat, _ = connected(FakeResponse.json_body([{"id": "c-1"}]))
        request = CalendarDataRequest(
            start=datetime(2021, 9, 20),
            end=datetime(2021, 9, 27),
            res_type=Kind.ROOM,
            federation_ids="1042721",
        )
        with pytest.raises(DecodeError, match="GetCalendarData response"):
            celcat.fetch(CalendarData, request)

    def test_sequence_errors_surface_unchanged(self) -> None:
        body = {"federationId": None, "entityType": 0, "elements": [element(None, 0)]}
        celcat, _ = connected(FakeResponse.json_body(body))
        with pytest.raises(UnlabeledElementError):
            celcat.fetch(SideBarEvent, SideBarEventRequest(event_id="ev-1"))


def test_context_manager_closes_session() -> None:
    session = FakeSession(FakeResponse(LOGIN_PAGE))
    with Celcat.connect(BASE_URL, session=session):
        assert not session.closed
    assert session.closed
