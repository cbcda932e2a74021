"""
Sans-I/O CalDAV protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and parses responses as pure data transformations.

The protocol layer is organized into:
- types: Core data structures (DAVRequest, DAVResponse, result types)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies
- operations: High-level CalDAVProtocol class combining builders and parsers

Example usage:

    from schedsync.protocol import CalDAVProtocol

    protocol = CalDAVProtocol("https://cal.example.com", "alice", "secret")

    # Build a request (no I/O)
    request = protocol.principal_request()

    # Execute via your preferred I/O
    response = await your_http_client.execute(request)

    # Parse response (no I/O)
    principal = protocol.parse_principal(response)
"""

from .types import (
    # Enums
    DAVMethod,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Result types
    CaldavCalendar,
    CaldavCalendarEvents,
    CalendarEvent,
    PrincipalData,
)
from .xml_builders import (
    build_calendars_propfind_body,
    build_event_query_body,
    build_principal_propfind_body,
)
from .xml_parsers import (
    parse_calendars_response,
    parse_events_response,
    parse_principal_response,
)
from .operations import CalDAVProtocol

__all__ = [
    # Enums
    "DAVMethod",
    # Request/Response
    "DAVRequest",
    "DAVResponse",
    # Result types
    "CaldavCalendar",
    "CaldavCalendarEvents",
    "CalendarEvent",
    "PrincipalData",
    # Builders
    "build_calendars_propfind_body",
    "build_event_query_body",
    "build_principal_propfind_body",
    # Parsers
    "parse_calendars_response",
    "parse_events_response",
    "parse_principal_response",
    # Protocol
    "CalDAVProtocol",
]
