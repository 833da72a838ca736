"""Resource listing: search the resources of one kind (rooms, groups, ...)."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import ValidationInfo, field_validator

from celcat.entities import ResourceId, ResourceKind, decode_identifier
from celcat.errors import DecodeError
from celcat.fetchable import FetchRequest, Identifier, WireModel


class Resource(WireModel):
    """One search hit. Its id belongs to the kind the request asked for."""

    id: Identifier
    text: str
    dept: str

    @field_validator("id", mode="before")
    @classmethod
    def _resource_id(cls, value: Any, info: ValidationInfo) -> ResourceId:
        kind = (info.context or {}).get("kind")
        if kind is None:
            raise ValueError("resource kind is required to decode a resource id")
        return decode_identifier(kind, value)


class ResourceListRequest(FetchRequest):
    my_resources: bool = False
    search_term: str = ""
    page_size: int = 50
    page_number: int = 1
    res_type: ResourceKind


class ResourceList(WireModel):
    """Resources returned for a ResourceListRequest.

    total counts every match on the service side; results holds one page.
    """

    METHOD_NAME: ClassVar[str] = "ReadResourceListItems"

    total: int
    results: list[Resource]

    @classmethod
    def from_response(cls, payload: Any, request: ResourceListRequest) -> "ResourceList":
        if not isinstance(payload, dict):
            raise DecodeError(
                f"resource list must be a JSON object, got {type(payload).__name__}"
            )
        return cls.model_validate(payload, context={"kind": request.res_type})
