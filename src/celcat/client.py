"""HTTP client for a Celcat web calendar.

Celcat handles authentication with an LDAP login form protected by an
anti-forgery token, then keeps the session in a cookie. Data is fetched by
POSTing forms to /Home/<method> endpoints that answer with JSON.

Example:
    with Celcat.connect("https://services-web.u-cergy.fr/calendar") as celcat:
        celcat.login(username, password)
        data = celcat.fetch(CalendarData, CalendarDataRequest(...))
"""

import re
from enum import Enum
from typing import Any, Optional, TypeVar

import requests
from pydantic import ValidationError

from celcat.errors import DecodeError, TokenNotFoundError, TransportError
from celcat.fetchable import Fetchable, FetchRequest, describe_validation_error
from celcat.logging import get_logger

logger = get_logger(__name__)

TOKEN_PATTERN = re.compile(r'<input name="__RequestVerificationToken".*?value="([^"]+)"')

F = TypeVar("F", bound=Fetchable)


class ClientState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def extract_token(html: str) -> str:
    """Extract the anti-forgery token from the login page.

    Raises:
        TokenNotFoundError: If the page has no __RequestVerificationToken input.
    """
    match = TOKEN_PATTERN.search(html)
    if match is None:
        raise TokenNotFoundError("cannot find __RequestVerificationToken in login page")
    return match.group(1)


class Celcat:
    """A Celcat session.

    The requests.Session owns the cookie jar; this class only keeps the base
    address and the anti-forgery token scraped at connection time. Requests
    are sent one at a time and nothing is retried: transport failures surface
    as TransportError, unexpected payloads as DecodeError.
    """

    def __init__(self, address: str, token: str, session: requests.Session) -> None:
        self.address = address.rstrip("/")
        self.token = token
        self.session = session
        self.state = ClientState.UNAUTHENTICATED

    @classmethod
    def connect(cls, address: str, session: Optional[requests.Session] = None) -> "Celcat":
        """Open a session and fetch the anti-forgery token.

        Args:
            address: Base address of the calendar, e.g.
                https://services-web.u-cergy.fr/calendar.
            session: Transport to use. A new requests.Session by default.

        Raises:
            TokenNotFoundError: If the login page has no token.
            TransportError: If the request for the login page fails. An error
                status is not checked: a page without the token gives
                TokenNotFoundError.
        """
        session = session if session is not None else requests.Session()
        address = address.rstrip("/")
        url = f"{address}/LdapLogin"

        logger.info("fetching_token", url=url)
        try:
            response = session.get(url)
        except requests.RequestException as e:
            logger.error("token_fetch_failed", url=url, error=str(e))
            raise TransportError(f"Cannot fetch login page {url}: {e}") from e

        token = extract_token(response.text)
        logger.debug("token_found", url=url)
        return cls(address, token, session)

    def login(self, username: str, password: str) -> None:
        """Submit credentials together with the anti-forgery token.

        Completion of the HTTP request counts as success, whatever the status
        code; the session cookie, if any, is kept by the transport.

        Raises:
            TransportError: If the request fails. The client stays unauthenticated.
        """
        url = f"{self.address}/LdapLogin/Logon"
        form = {
            "Name": username,
            "Password": password,
            "__RequestVerificationToken": self.token,
        }

        self.state = ClientState.AUTHENTICATING
        logger.info("login_started", url=url, username=username)
        try:
            response = self.session.post(url, data=form)
        except requests.RequestException as e:
            self.state = ClientState.UNAUTHENTICATED
            logger.error("login_failed", url=url, error=str(e))
            raise TransportError(f"Login request to {url} failed: {e}") from e

        self.state = ClientState.AUTHENTICATED
        logger.info("login_succeeded", username=username, status=response.status_code)

    @property
    def authenticated(self) -> bool:
        return self.state is ClientState.AUTHENTICATED

    def fetch(self, payload: type[F], request: FetchRequest) -> F:
        """POST a request to the payload's method and decode the answer.

        Args:
            payload: Payload class to decode into (CalendarData, ResourceList,
                SideBarEvent).
            request: The matching request model.

        Raises:
            TransportError: If the request fails or the body is not JSON.
            DecodeError: If the JSON does not have the payload's shape.
        """
        method = payload.METHOD_NAME
        url = f"{self.address}/Home/{method}"
        form = request.to_form()

        logger.debug("fetch_started", method=method, form=form)
        try:
            response = self.session.post(url, data=form)
            response.raise_for_status()
            body: Any = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("fetch_failed", method=method, error=str(e))
            raise TransportError(f"{method} request failed: {e}") from e

        try:
            result = payload.from_response(body, request)
        except ValidationError as e:
            logger.warning("decode_failed", method=method, error=str(e))
            raise DecodeError(
                f"{method} response: {describe_validation_error(e)}"
            ) from e
        except DecodeError as e:
            logger.warning("decode_failed", method=method, error=str(e))
            raise

        logger.info("fetch_succeeded", method=method)
        return result

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Celcat":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
