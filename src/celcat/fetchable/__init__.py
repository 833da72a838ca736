"""Payloads the client can fetch, and the request models that ask for them.

Each payload class names the service method that returns it (METHOD_NAME) and
knows how to build itself from the decoded JSON body (from_response). The
client only ever talks to this Fetchable interface.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Optional, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, InstanceOf, PlainSerializer, ValidationError
from pydantic.alias_generators import to_camel

from celcat.entities import ResourceId, encode_identifier

# Identifier fields hold ResourceId values built by field validators and go
# back on the wire as their plain string.
Identifier = Annotated[
    InstanceOf[ResourceId], PlainSerializer(encode_identifier, return_type=str)
]
OptionalIdentifier = Annotated[
    Optional[InstanceOf[ResourceId]],
    PlainSerializer(encode_identifier, return_type=Optional[str]),
]


class WireModel(BaseModel):
    """Immutable model with camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FetchRequest(WireModel):
    """A request body, posted to the service as a form."""

    def to_form(self) -> dict[str, str]:
        """Encode the request as form fields.

        Booleans are written lowercase, kinds as their code, identifiers as
        their string. None fields are left out.
        """
        form: dict[str, str] = {}
        for key, value in self.model_dump(mode="json", by_alias=True).items():
            if value is None:
                continue
            if isinstance(value, bool):
                form[key] = "true" if value else "false"
            else:
                form[key] = str(value)
        return form


RequestT = TypeVar("RequestT", bound=FetchRequest, contravariant=True)


class Fetchable(Protocol[RequestT]):
    """A payload returned by one service method."""

    METHOD_NAME: ClassVar[str]

    @classmethod
    def from_response(cls, payload: Any, request: RequestT) -> "Fetchable[RequestT]":
        ...


def describe_validation_error(exc: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"]) or "<root>"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)
