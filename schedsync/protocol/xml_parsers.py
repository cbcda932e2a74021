"""
Pure functions for parsing CalDAV XML responses.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.
"""

import logging
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import TypeVar
from typing import Union
from urllib.parse import urlsplit

from schedsync.elements import cdav
from schedsync.elements import dav
from schedsync.lib import error
from schedsync.lib import xmlcodec
from schedsync.lib.vcal import extract_events

from .types import CaldavCalendar
from .types import CaldavCalendarEvents
from .types import PrincipalData

log = logging.getLogger(__name__)

P = TypeVar("P")

STATUS_OK = "HTTP/1.1 200 OK"


def _ok_responses(
    multistatus: "dav.MultiStatus[P]",
) -> Iterator[Tuple[str, P]]:
    """
    Yield (href, prop) for the responses whose first propstat says
    200 OK.  Any other propstat following the first one is not looked at.
    """
    for response in multistatus.response:
        propstat = response.first_propstat()
        if propstat is None:
            log.debug("no propstat for %s, skipping", response.href)
            continue
        if propstat.status.strip() != STATUS_OK:
            log.debug("status %r for %s, skipping", propstat.status, response.href)
            continue
        if propstat.prop is None:
            log.debug("no prop for %s, skipping", response.href)
            continue
        yield response.href, propstat.prop


def _last_segment(path: str) -> str:
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else ""


def parse_principal_response(
    body: Union[str, bytes], huge_tree: bool = False
) -> PrincipalData:
    """
    Parse the PROPFIND response for the current-user-principal.

    The user id is the first segment of the principal path, i.e.
    "/principals/alice/" gives "principals" and "/123456/principal/"
    gives "123456".  An absolute URL is reduced to its path first.

    Raises:
        DeserializationError: the body is not a multistatus document
        EmptyResponse: there is no response element
        MalformedPrincipalPath: no usable href in the first response
    """
    multistatus = xmlcodec.decode(
        dav.MultiStatus[dav.PrincipalProp], body, huge_tree=huge_tree
    )
    if not multistatus.response:
        raise error.EmptyResponse(reason="no response element in multistatus")

    response = multistatus.response[0]
    propstat = response.first_propstat()
    prop = propstat.prop if propstat is not None else None
    principal = prop.current_user_principal if prop is not None else None
    path: Optional[str] = principal.href if principal is not None else None
    if not path or not path.strip():
        raise error.MalformedPrincipalPath(
            url=response.href, reason="no current-user-principal href"
        )

    ## some servers answer with an absolute URL
    path = urlsplit(path.strip()).path
    user_id = path.strip("/").split("/")[0]
    if not user_id:
        raise error.MalformedPrincipalPath(
            url=response.href, reason="principal path %r has no segments" % path
        )
    return PrincipalData(user_id=user_id, path=path)


def parse_calendars_response(
    body: Union[str, bytes], huge_tree: bool = False
) -> List[CaldavCalendar]:
    """
    Parse the Depth 1 PROPFIND response of a calendar home.

    Only the collections having both the collection and the calendar
    resource type are returned, in document order.  The calendar home
    itself and the inbox/outbox and such are skipped.
    """
    multistatus = xmlcodec.decode(
        dav.MultiStatus[cdav.CalendarProp], body, huge_tree=huge_tree
    )
    calendars = []
    for href, prop in _ok_responses(multistatus):
        resourcetype = prop.resourcetype
        if (
            resourcetype is None
            or resourcetype.collection is None
            or resourcetype.calendar is None
        ):
            log.debug("%s is not a calendar collection", href)
            continue
        calendars.append(
            CaldavCalendar(
                id=_last_segment(href),
                path=href,
                displayname=prop.displayname or "",
                collection=True,
                calendar=True,
                privileges=prop.privileges.names() if prop.privileges else [],
                calendar_color=prop.calendar_color or "",
                components=prop.components.names() if prop.components else [],
                description=prop.description or "",
            )
        )
    return calendars


def parse_events_response(
    body: Union[str, bytes], huge_tree: bool = False
) -> List[CaldavCalendarEvents]:
    """
    Parse the calendar-query REPORT response.

    Entries lacking the ETag or the calendar-data are dropped, the
    calendar-data of the others goes through the ICS extractor.

    Raises:
        EmptyResultSet: nothing was left after filtering.  An empty
            calendar gives this as well.
    """
    multistatus = xmlcodec.decode(
        dav.MultiStatus[cdav.EventProp], body, huge_tree=huge_tree
    )
    results = []
    for href, prop in _ok_responses(multistatus):
        if not prop.getetag or not prop.calendar_data:
            log.debug("%s lacks etag or calendar-data, skipping", href)
            continue
        results.append(
            CaldavCalendarEvents(
                href=href,
                etag=prop.getetag,
                events=extract_events(prop.calendar_data),
            )
        )
    if not results:
        raise error.EmptyResultSet(reason="no usable calendar objects in response")
    return results
