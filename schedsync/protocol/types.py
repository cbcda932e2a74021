"""
Core protocol types for the Sans-I/O CalDAV implementation.

These dataclasses represent HTTP requests and responses at the protocol level,
independent of any I/O implementation, plus the results the protocol
operations produce.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from schedsync.lib.vcal import CalendarEvent


class DAVMethod(Enum):
    """The WebDAV/CalDAV HTTP methods we are using."""

    PROPFIND = "PROPFIND"
    REPORT = "REPORT"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (PROPFIND or REPORT)
        url: Full URL for the request
        headers: HTTP headers as dict
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class DAVResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers as dict
        body: Response body as bytes
    """

    status: int
    headers: Dict[str, str]
    body: bytes

    @property
    def is_multistatus(self) -> bool:
        """True if this is a 207 Multi-Status response."""
        return self.status == 207

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class PrincipalData:
    """
    The CalDAV principal of the authenticated user.

    Attributes:
        user_id: first segment of the principal path
        path: the principal path as given by the server
    """

    user_id: str
    path: str


@dataclass
class CaldavCalendar:
    """
    A calendar collection found through PROPFIND.

    Attributes:
        id: last segment of the path
        path: the href of the collection
        displayname: display name, empty string if not given
        collection: resourcetype includes <d:collection/>
        calendar: resourcetype includes <cal:calendar/>
        privileges: privilege names of the current user
        calendar_color: apple calendar-color, empty string if not given
        components: supported component names (VEVENT, VTODO, ...)
        description: calendar description, empty string if not given
    """

    id: str
    path: str
    displayname: str = ""
    collection: bool = False
    calendar: bool = False
    privileges: List[str] = field(default_factory=list)
    calendar_color: str = ""
    components: List[str] = field(default_factory=list)
    description: str = ""


@dataclass
class CaldavCalendarEvents:
    """
    The events of one calendar object resource from a calendar-query REPORT.

    Attributes:
        href: path of the calendar object resource
        etag: the ETag given for the resource
        events: the VEVENTs found in the calendar-data, in order
    """

    href: str
    etag: str
    events: List[CalendarEvent] = field(default_factory=list)
