#!/usr/bin/env python
"""
Extraction of event fields from the calendar-data blobs delivered by
CalDAV servers.

Only the property level of the iCalendar data is looked into.  Property
values are kept as they appear on the wire (i.e. "20240105T100000Z" for a
DTSTART, parameters like TZID are dropped), no timezone handling or
recurrence expansion is done here.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Union

import icalendar

from schedsync.lib import error
from schedsync.lib.python_utilities import to_normal_str

log = logging.getLogger(__name__)

REQUIRED_PROPERTIES = ("UID", "CREATED", "SUMMARY", "DTSTART", "DTEND")
OPTIONAL_PROPERTIES = (
    "LAST-MODIFIED",
    "STATUS",
    "ORGANIZER",
    "RECURRENCE-ID",
    "RRULE",
    "LOCATION",
    "TRANSP",
    "CATEGORIES",
    "ATTACH",
    "ATTENDEE",
)

## The order the VEVENT properties are asked for in a calendar-query
EVENT_PROPERTIES = (
    "UID",
    "CREATED",
    "LAST-MODIFIED",
    "SUMMARY",
    "DTSTART",
    "DTEND",
    "ORGANIZER",
    "STATUS",
    "RECURRENCE-ID",
    "RRULE",
    "LOCATION",
    "TRANSP",
    "CATEGORIES",
    "ATTACH",
    "ATTENDEE",
)

_vcalendar_re = re.compile(
    r"^BEGIN:VCALENDAR[ \t]*$.*?^END:VCALENDAR[ \t]*$",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)


def _attribute_name(property_name: str) -> str:
    return property_name.lower().replace("-", "_")


@dataclass(frozen=True)
class CalendarEvent:
    """The fields of one VEVENT, as strings"""

    uid: str
    created: str
    summary: str
    dtstart: str
    dtend: str
    last_modified: Optional[str] = None
    status: Optional[str] = None
    organizer: Optional[str] = None
    recurrence_id: Optional[str] = None
    rrule: Optional[str] = None
    location: Optional[str] = None
    transp: Optional[str] = None
    categories: Optional[str] = None
    attach: Optional[str] = None
    attendee: Optional[str] = None

    @classmethod
    def from_properties(cls, properties: Dict[str, str]) -> "CalendarEvent":
        """
        Build an event from a property name -> value map.  Raises
        MissingRequiredProperty if one of UID, CREATED, SUMMARY, DTSTART
        or DTEND is absent.
        """
        kwargs = {}
        for name in REQUIRED_PROPERTIES:
            if properties.get(name) is None:
                raise error.MissingRequiredProperty(name)
            kwargs[_attribute_name(name)] = properties[name]
        for name in OPTIONAL_PROPERTIES:
            kwargs[_attribute_name(name)] = properties.get(name)
        return cls(**kwargs)


def iter_calendar_objects(data: Union[str, bytes]) -> Iterator[str]:
    """Split a blob into its BEGIN:VCALENDAR ... END:VCALENDAR objects"""
    text = to_normal_str(data) or ""
    found = 0
    for match in _vcalendar_re.finditer(text):
        found += 1
        yield match.group(0) + "\n"
    started = len(re.findall(r"^BEGIN:VCALENDAR", text, re.MULTILINE | re.IGNORECASE))
    if started > found:
        log.warning(
            "%i calendar object(s) without END:VCALENDAR ignored", started - found
        )


def _property_text(value) -> str:
    if hasattr(value, "to_ical"):
        value = value.to_ical()
    return to_normal_str(value)


def event_properties(component: icalendar.Component) -> Dict[str, str]:
    """
    Flat name -> value map of the properties of a component.  When a
    property occurs more than once, the last occurrence wins.
    """
    properties = {}
    for name in component.keys():
        value = component[name]
        if isinstance(value, list):
            if not value:
                continue
            value = value[-1]
        properties[name.upper()] = _property_text(value)
    return properties


def extract_events(data: Union[str, bytes], strict: bool = False) -> List[CalendarEvent]:
    """
    Extract the VEVENTs from a blob holding one or more calendar objects.

    A calendar object that cannot be parsed is logged and skipped.  An
    event lacking a required property is logged and skipped as well,
    unless strict is set, in which case MissingRequiredProperty is raised.
    """
    events = []
    for calendar_object in iter_calendar_objects(data):
        try:
            calendar = icalendar.Calendar.from_ical(calendar_object)
        except ValueError:
            log.warning("skipping malformed calendar object", exc_info=True)
            log.debug(calendar_object)
            continue
        for component in calendar.walk("VEVENT"):
            try:
                events.append(CalendarEvent.from_properties(event_properties(component)))
            except error.MissingRequiredProperty as err:
                if strict:
                    raise
                log.warning(
                    "skipping event %s: %s",
                    component.get("UID", "(no UID)"),
                    err.reason,
                )
    return events
