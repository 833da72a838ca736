"""Event detail: the side bar Celcat shows when a course is clicked.

The service sends the side bar as an array of labeled elements:

    [
      {"label": "Time", "content": "9/6/2021 8:30 AM-11:45 AM", "entityType": 0, ...},
      {"label": "Salles", "content": "CHE2 Larousse", "federationId": "1172982", "entityType": 102, ...},
      {"label": null, "content": "CHE2 Condorcet", "federationId": "1172981", "entityType": 102, ...},
    ]

One logical field can span several entries: only the first carries the label,
the following ones have a null (or no) label and belong to the same block. The
decoder therefore keeps the last label it saw while walking the array.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from celcat.entities import EntityId, Kind, decode_identifier, decode_kind, kind_from_code
from celcat.errors import (
    DecodeError,
    ElementDecodeError,
    UnknownLabelError,
    UnlabeledElementError,
)
from celcat.fetchable import (
    FetchRequest,
    Identifier,
    OptionalIdentifier,
    WireModel,
    describe_validation_error,
)
from celcat.logging import get_logger

log = get_logger(__name__)


class ElementVariant(str, Enum):
    """What a side bar element describes."""

    TIME = "Time"
    CATEGORY = "Category"
    GRADE = "Grade"
    NAME = "Name"
    MODULE = "Module"
    ROOM = "Room"
    TEACHER = "Teacher"

    @property
    def kind(self) -> Kind:
        return VARIANT_KINDS[self]


VARIANT_KINDS: Mapping[ElementVariant, Kind] = {
    ElementVariant.TIME: Kind.UNKNOWN,
    ElementVariant.CATEGORY: Kind.UNKNOWN,
    ElementVariant.GRADE: Kind.UNKNOWN,
    ElementVariant.NAME: Kind.UNKNOWN,
    ElementVariant.MODULE: Kind.MODULE,
    ElementVariant.ROOM: Kind.ROOM,
    ElementVariant.TEACHER: Kind.STAFF,
}

# Labels as the service spells them. Matched exactly: case and accents count.
LABELS: Mapping[str, ElementVariant] = {
    "Time": ElementVariant.TIME,
    "Name": ElementVariant.NAME,
    "Catégorie": ElementVariant.CATEGORY,
    "Matière": ElementVariant.MODULE,
    "Salle": ElementVariant.ROOM,
    "Salles": ElementVariant.ROOM,
    "Enseignant": ElementVariant.TEACHER,
    "Enseignants": ElementVariant.TEACHER,
    "Note": ElementVariant.GRADE,
    "Notes": ElementVariant.GRADE,
}


class TaggedElement(WireModel):
    """The fields of one side bar element.

    Validate with context={"kind": <Kind>} to require that exact entity type;
    without a context the entity type code is only looked up.
    """

    entity_type: Kind
    federation_id: OptionalIdentifier
    content: Optional[str] = None
    assignment_context: Optional[str] = None
    contains_hyperlinks: bool
    is_notes: bool
    is_student_specific: bool

    @field_validator("entity_type", mode="before")
    @classmethod
    def _entity_type(cls, value: Any, info: ValidationInfo) -> Kind:
        expected = (info.context or {}).get("kind")
        if expected is None:
            return kind_from_code(value)
        return decode_kind(value, expected)

    @field_validator("federation_id", mode="before")
    @classmethod
    def _federation_id(cls, value: Any, info: ValidationInfo) -> EntityId:
        kind = info.data.get("entity_type")
        if kind is None:
            # entity_type already failed and is reported on its own
            return None
        return decode_identifier(kind, value)

    @property
    def kind(self) -> Kind:
        return self.entity_type


class SideBarEventElement(BaseModel):
    """A side bar element paired with its variant.

    The variant fixes the element's kind (Room elements hold room ids,
    Teacher elements staff ids, ...); a mismatched pair is rejected.
    """

    model_config = ConfigDict(frozen=True)

    variant: ElementVariant
    element: TaggedElement

    @model_validator(mode="after")
    def _kind_matches_variant(self) -> "SideBarEventElement":
        expected = VARIANT_KINDS[self.variant]
        if self.element.entity_type is not expected:
            raise ValueError(
                f"{self.variant.value} elements must be {expected.label}, "
                f"got {self.element.entity_type.label}"
            )
        return self


def _probe_label(entry: Mapping[str, Any], index: int) -> Optional[ElementVariant]:
    label = entry.get("label")
    if label is None:
        return None
    if not isinstance(label, str) or label not in LABELS:
        raise UnknownLabelError(index, label)
    return LABELS[label]


def decode_element(
    entry: Mapping[str, Any], index: int, variant: ElementVariant
) -> SideBarEventElement:
    """Decode one array entry as the given variant.

    Raises:
        ElementDecodeError: Naming the position and variant, chained from the
            underlying validation failure.
    """
    fields = {k: v for k, v in entry.items() if k != "label"}
    try:
        element = TaggedElement.model_validate(fields, context={"kind": variant.kind})
    except ValidationError as e:
        raise ElementDecodeError(
            index,
            f"{variant.kind.label} element: {describe_validation_error(e)}",
            variant.value,
        ) from e
    return SideBarEventElement(variant=variant, element=element)


def decode_elements(entries: Any) -> list[SideBarEventElement]:
    """Decode a side bar array into its ordered elements.

    An entry without a label (or with a null one) continues the block of the
    previous labeled entry. The first entry must be labeled.

    Raises:
        DecodeError: If entries is not an array.
        UnlabeledElementError: If the array starts with an unlabeled entry.
        UnknownLabelError: If a label maps to no variant.
        ElementDecodeError: If an entry's fields do not fit its variant.
    """
    if not isinstance(entries, list):
        raise DecodeError(
            f"side bar elements must be a JSON array, got {type(entries).__name__}"
        )

    current: Optional[ElementVariant] = None
    elements: list[SideBarEventElement] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ElementDecodeError(
                index, f"expected an object, got {type(entry).__name__}"
            )
        probed = _probe_label(entry, index)
        if probed is not None:
            current = probed
        elif current is None:
            raise UnlabeledElementError(index)
        elements.append(decode_element(entry, index, current))

    log.debug("side_bar_decoded", elements=len(elements))
    return elements


class SideBarEventRequest(FetchRequest):
    event_id: Identifier

    @field_validator("event_id", mode="before")
    @classmethod
    def _event_id(cls, value: Any) -> Any:
        return decode_identifier(Kind.COURSE, value)


class SideBarEvent(WireModel):
    """Details of one course, as shown in the side bar."""

    METHOD_NAME: ClassVar[str] = "GetSideBarEvent"

    federation_id: None = None
    entity_type: Kind = Kind.UNKNOWN
    elements: list[SideBarEventElement]

    @field_validator("entity_type", mode="before")
    @classmethod
    def _entity_type(cls, value: Any) -> Kind:
        return decode_kind(value, Kind.UNKNOWN)

    @classmethod
    def from_response(cls, payload: Any, request: SideBarEventRequest) -> "SideBarEvent":
        if not isinstance(payload, dict):
            raise DecodeError(
                f"side bar event must be a JSON object, got {type(payload).__name__}"
            )
        elements = decode_elements(payload.get("elements"))
        return cls.model_validate({**payload, "elements": elements})

    def of(self, variant: ElementVariant) -> list[TaggedElement]:
        """Elements of one variant, in order."""
        return [e.element for e in self.elements if e.variant is variant]

    def contents(self, variant: ElementVariant) -> list[str]:
        """Non-empty text contents of one variant, e.g. all room names."""
        return [e.content for e in self.of(variant) if e.content]
