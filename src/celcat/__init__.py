"""Typed client for the Celcat academic-scheduling web calendar.

Authenticates against the calendar's LDAP login, fetches calendar listings,
resource listings and event details, and decodes them into typed models.
"""

from celcat.client import Celcat, ClientState
from celcat.entities import Kind, ResourceId, ResourceKind
from celcat.errors import (
    CelcatError,
    DecodeError,
    TokenNotFoundError,
    TransportError,
)
from celcat.fetchable.calendar import CalendarData, CalendarDataRequest, CalView, Course
from celcat.fetchable.event import (
    ElementVariant,
    SideBarEvent,
    SideBarEventElement,
    SideBarEventRequest,
    TaggedElement,
)
from celcat.fetchable.resources import Resource, ResourceList, ResourceListRequest

__all__ = [
    "Celcat",
    "ClientState",
    "Kind",
    "ResourceId",
    "ResourceKind",
    "CelcatError",
    "DecodeError",
    "TokenNotFoundError",
    "TransportError",
    "CalendarData",
    "CalendarDataRequest",
    "CalView",
    "Course",
    "ElementVariant",
    "SideBarEvent",
    "SideBarEventElement",
    "SideBarEventRequest",
    "TaggedElement",
    "Resource",
    "ResourceList",
    "ResourceListRequest",
]
