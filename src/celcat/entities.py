"""Resources and entities.

Celcat often requires a *resource* type (like Kind.STUDENT) in a request to
know what it must send back, and sometimes a *resource* ID which identifies a
particular resource. Celcat sends back *entities*, identified by an entity type
code and an entity ID.

An entity can be a resource, in which case it has a string ID. If it isn't a
resource it has no ID (null in JSON); its type is Kind.UNKNOWN and its ID is
the unit value None.

The pairing kind -> (code, identifier shape, resource capability) lives in one
read-only table, KIND_TABLE. Encoding and decoding is generic over that table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Literal, Mapping

from celcat.errors import IdentifierError, KindMismatchError


class Kind(IntEnum):
    """Entity types, valued by their wire code."""

    UNKNOWN = 0
    MODULE = 100
    STAFF = 101
    ROOM = 102
    GROUP = 103
    STUDENT = 104
    TEAM = 105
    EQUIPMENT = 106
    COURSE = 107

    @property
    def label(self) -> str:
        """Display name, e.g. "Room"."""
        return self.name.capitalize()


class IdShape(Enum):
    """How an entity's identifier looks on the wire."""

    UNIT = "unit"  # always JSON null
    STRING = "string"  # opaque JSON string


@dataclass(frozen=True)
class KindSpec:
    kind: Kind
    code: int
    id_shape: IdShape
    is_resource: bool


KIND_TABLE: Mapping[Kind, KindSpec] = MappingProxyType(
    {
        spec.kind: spec
        for spec in (
            KindSpec(Kind.UNKNOWN, 0, IdShape.UNIT, is_resource=False),
            KindSpec(Kind.MODULE, 100, IdShape.STRING, is_resource=True),
            KindSpec(Kind.STAFF, 101, IdShape.STRING, is_resource=True),
            KindSpec(Kind.ROOM, 102, IdShape.STRING, is_resource=True),
            KindSpec(Kind.GROUP, 103, IdShape.STRING, is_resource=True),
            KindSpec(Kind.STUDENT, 104, IdShape.STRING, is_resource=True),
            KindSpec(Kind.TEAM, 105, IdShape.STRING, is_resource=True),
            KindSpec(Kind.EQUIPMENT, 106, IdShape.STRING, is_resource=True),
            KindSpec(Kind.COURSE, 107, IdShape.STRING, is_resource=True),
        )
    }
)

if set(KIND_TABLE) != set(Kind) or any(s.code != s.kind for s in KIND_TABLE.values()):
    raise RuntimeError("KIND_TABLE must list every Kind under its own wire code")

# Kinds usable as a request filter: every kind but Kind.UNKNOWN, so a type
# checker rejects Kind.UNKNOWN wherever a resource kind is required.
ResourceKind = Literal[
    Kind.MODULE,
    Kind.STAFF,
    Kind.ROOM,
    Kind.GROUP,
    Kind.STUDENT,
    Kind.TEAM,
    Kind.EQUIPMENT,
    Kind.COURSE,
]


@dataclass(frozen=True)
class ResourceId:
    """The string identifier of one resource, tagged with its kind.

    Two IDs with the same text but different kinds are different values, so a
    room ID cannot be passed where a student ID is expected.
    """

    kind: Kind
    value: str

    def __post_init__(self) -> None:
        if not is_resource_kind(self.kind):
            raise IdentifierError(f"{self.kind.label} entities have no identifier")
        if not isinstance(self.value, str):
            raise IdentifierError(
                f"{self.kind.label} identifier must be a string, got {self.value!r}"
            )

    def __str__(self) -> str:
        return self.value


# None is the unit identifier of Kind.UNKNOWN
EntityId = ResourceId | None


def encode_kind(kind: Kind) -> int:
    """Wire code of a kind."""
    return KIND_TABLE[kind].code


def decode_kind(value: Any, expected: Kind) -> Kind:
    """Validate a wire code against the kind it must be.

    Raises:
        KindMismatchError: If value is not exactly the expected code. No
            coercion is attempted: booleans, floats and strings are rejected.
    """
    code = KIND_TABLE[expected].code
    if isinstance(value, Kind):
        value = int(value)
    if type(value) is not int or value != code:
        raise KindMismatchError(
            f"expected {code} ({expected.label}), got {value!r}"
        )
    return expected


def kind_from_code(value: Any) -> Kind:
    """Look up the kind for a wire code.

    Raises:
        KindMismatchError: If no kind has that code.
    """
    if isinstance(value, Kind):
        return value
    if type(value) is int:
        for spec in KIND_TABLE.values():
            if spec.code == value:
                return spec.kind
    raise KindMismatchError(f"unknown entity type code {value!r}")


def id_shape(kind: Kind) -> IdShape:
    return KIND_TABLE[kind].id_shape


def is_resource_kind(kind: Kind) -> bool:
    return KIND_TABLE[kind].is_resource


def resource_kinds() -> tuple[Kind, ...]:
    """All kinds a request may filter by, in code order."""
    return tuple(spec.kind for spec in KIND_TABLE.values() if spec.is_resource)


def decode_identifier(kind: Kind, value: Any) -> EntityId:
    """Decode a wire identifier according to its kind's shape.

    Raises:
        IdentifierError: If Kind.UNKNOWN gets anything but null, or any other
            kind gets anything but a string.
    """
    if id_shape(kind) is IdShape.UNIT:
        if value is not None:
            raise IdentifierError(
                f"{kind.label} identifier must be null, got {value!r}"
            )
        return None
    if isinstance(value, ResourceId):
        if value.kind is not kind:
            raise IdentifierError(
                f"expected a {kind.label} identifier, got a {value.kind.label} one"
            )
        return value
    if not isinstance(value, str):
        raise IdentifierError(
            f"{kind.label} identifier must be a string, got {value!r}"
        )
    return ResourceId(kind, value)


def encode_identifier(identifier: EntityId) -> str | None:
    """Wire form of an identifier: null for the unit ID, the string otherwise."""
    if identifier is None:
        return None
    return identifier.value
