"""
Pure functions for building CalDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from typing import Iterable

from schedsync.elements import cdav
from schedsync.elements import dav
from schedsync.lib import xmlcodec
from schedsync.lib.namespace import calendar_query_nsmap
from schedsync.lib.namespace import propfind_nsmap
from schedsync.lib.vcal import EVENT_PROPERTIES


def build_principal_propfind_body() -> bytes:
    """
    Build the PROPFIND body asking for the current-user-principal.

    Returns:
        UTF-8 encoded XML bytes
    """
    propfind = dav.Propfind(prop=dav.PrincipalRequestProp())
    return xmlcodec.encode(propfind, nsmap=propfind_nsmap)


def build_calendars_propfind_body() -> bytes:
    """
    Build the PROPFIND body used for listing the calendars in the
    calendar home of a principal.

    Returns:
        UTF-8 encoded XML bytes
    """
    propfind = dav.Propfind(prop=cdav.CalendarRequestProp())
    return xmlcodec.encode(propfind, nsmap=propfind_nsmap)


def _event_comp(properties: Iterable[str]) -> cdav.Comp:
    vevent = cdav.Comp(
        name="VEVENT", children=[cdav.CompProp(name=name) for name in properties]
    )
    return cdav.Comp(
        name="VCALENDAR", children=[cdav.CompProp(name="VERSION"), vevent]
    )


def build_event_query_body(properties: Iterable[str] = EVENT_PROPERTIES) -> bytes:
    """
    Build the calendar-query REPORT body fetching all VEVENTs of a
    calendar, with the ETag and a calendar-data restricted to the given
    VEVENT properties.

    Args:
        properties: iCalendar property names to ask for

    Returns:
        UTF-8 encoded XML bytes
    """
    query = cdav.CalendarQuery(
        prop=cdav.EventRequestProp(
            calendar_data=cdav.CalendarData(comp=_event_comp(properties))
        ),
        filter=cdav.Filter(
            comp_filter=cdav.CompFilter(
                name="VCALENDAR", comp_filter=cdav.CompFilter(name="VEVENT")
            )
        ),
    )
    return xmlcodec.encode(query, nsmap=calendar_query_nsmap)
