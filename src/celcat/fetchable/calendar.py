"""Calendar listing: the courses of one resource between two dates."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import ValidationInfo, field_validator, model_validator

from celcat.entities import Kind, ResourceId, ResourceKind, decode_identifier
from celcat.errors import DecodeError
from celcat.fetchable import FetchRequest, Identifier, WireModel


class CalView(str, Enum):
    """Calendar view the service renders the listing for."""

    MONTH = "month"
    AGENDA_WEEK = "agendaWeek"
    AGENDA_DAY = "agendaDay"
    LIST_WEEK = "listWeek"


class Course(WireModel):
    """One scheduled course occurrence from a calendar listing."""

    id: Identifier
    start: datetime
    end: Optional[datetime] = None
    all_day: bool
    description: str
    background_color: str
    text_color: str
    department: Optional[str] = None
    faculty: Optional[str] = None
    event_category: Optional[str] = None
    sites: Optional[list[str]] = None
    modules: Optional[list[Identifier]] = None
    register_status: int  # opaque, observed values 0-2
    student_mark: float

    @field_validator("id", mode="before")
    @classmethod
    def _course_id(cls, value: Any) -> ResourceId:
        return decode_identifier(Kind.COURSE, value)

    @field_validator("modules", mode="before")
    @classmethod
    def _module_ids(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [decode_identifier(Kind.MODULE, v) for v in value]
        return value


class CalendarDataRequest(FetchRequest):
    """Ask for the calendar of one resource.

    federation_ids must be an identifier of res_type; a plain string is taken
    as one.
    """

    start: datetime
    end: datetime
    res_type: ResourceKind
    cal_view: CalView = CalView.MONTH
    federation_ids: Identifier
    colour_scheme: int = 3  # opaque, the web UI sends 3

    @field_validator("federation_ids", mode="before")
    @classmethod
    def _federation_ids(cls, value: Any, info: ValidationInfo) -> Any:
        res_type = info.data.get("res_type")
        if isinstance(value, str) and res_type is not None:
            return ResourceId(res_type, value)
        return value

    @model_validator(mode="after")
    def _id_matches_res_type(self) -> "CalendarDataRequest":
        if self.federation_ids.kind is not self.res_type:
            raise ValueError(
                f"federation_ids is a {self.federation_ids.kind.label} identifier, "
                f"but res_type is {Kind(self.res_type).label}"
            )
        return self


class CalendarData(WireModel):
    """Courses returned for a CalendarDataRequest."""

    METHOD_NAME: ClassVar[str] = "GetCalendarData"

    res_type: ResourceKind
    courses: list[Course]

    @classmethod
    def from_response(cls, payload: Any, request: CalendarDataRequest) -> "CalendarData":
        if not isinstance(payload, list):
            raise DecodeError(
                f"calendar data must be a JSON array, got {type(payload).__name__}"
            )
        return cls(res_type=request.res_type, courses=payload)
