"""Error hierarchy for the Celcat client.

Every failure the client surfaces derives from CelcatError, so callers can catch
one type at the top and still tell transport problems apart from payloads the
client could not make sense of. Nothing here is retried internally.

Example usage:
    try:
        events = client.fetch(SideBarEvent, request)
    except TransportError:
        ...  # network is down, service returned 5xx, body was not JSON
    except DecodeError as e:
        ...  # service answered, but not in a shape we understand
"""


class CelcatError(Exception):
    """Base exception for all Celcat client errors."""

    pass


class TransportError(CelcatError):
    """Network or HTTP failure while talking to the service.

    Examples: connection refused, 500 Internal Server Error, non-JSON response body.
    """

    pass


class TokenNotFoundError(CelcatError):
    """The login page did not contain the anti-forgery token.

    Fatal to client construction: the service layout changed or the address
    does not point at a Celcat calendar.
    """

    pass


class DecodeError(CelcatError):
    """A response did not match the expected payload shape."""

    pass


class KindMismatchError(DecodeError, ValueError):
    """An entity type code did not match the expected kind.

    Also a ValueError so pydantic validators report it as a field error.
    """

    pass


class IdentifierError(DecodeError, ValueError):
    """An identifier did not have the shape its kind requires."""

    pass


class UnlabeledElementError(DecodeError):
    """A side bar element had no label and no earlier element to inherit one from."""

    def __init__(self, index: int) -> None:
        super().__init__(
            f"element {index} has no label and no preceding labeled element"
        )
        self.index = index


class UnknownLabelError(DecodeError):
    """A side bar element carried a label that maps to no element variant."""

    def __init__(self, index: int, label: object) -> None:
        super().__init__(f"element {index} has unknown label {label!r}")
        self.index = index
        self.label = label


class ElementDecodeError(DecodeError):
    """A side bar element's fields failed to decode for its resolved variant.

    The underlying cause is chained as __cause__.
    """

    def __init__(self, index: int, detail: str, variant: str | None = None) -> None:
        where = f"element {index}"
        if variant is not None:
            where += f" ({variant})"
        super().__init__(f"{where}: {detail}")
        self.index = index
        self.variant = variant
