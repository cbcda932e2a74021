"""
CalDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to CalDAV operations while
remaining completely I/O-free.
"""

import base64
from typing import Dict, List, Optional

from .types import (
    CaldavCalendar,
    CaldavCalendarEvents,
    DAVMethod,
    DAVRequest,
    DAVResponse,
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


class CalDAVProtocol:
    """
    Sans-I/O CalDAV protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication is delegated to an external I/O implementation.

    Example:
        protocol = CalDAVProtocol("https://caldav.icloud.com", "alice", "secret")

        # Build request
        request = protocol.principal_request()

        # Execute with your I/O (not shown)
        response = await io.execute(request)

        # Parse response
        principal = protocol.parse_principal(response)
    """

    def __init__(
        self,
        base_url: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        huge_tree: bool = False,
    ):
        """
        Initialize the protocol handler.

        Args:
            base_url: Base URL for the CalDAV server
            username: Username for Basic authentication
            password: Password for Basic authentication
            huge_tree: Allow parsing very large XML responses
        """
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.username = username
        self.password = password
        self.huge_tree = huge_tree
        self._auth_header = self._build_auth_header(username, password)

    def _build_auth_header(
        self,
        username: Optional[str],
        password: Optional[str],
    ) -> Optional[str]:
        """Build Basic auth header if credentials provided."""
        if username is not None and password is not None:
            credentials = f"{username}:{password}"
            encoded = base64.b64encode(credentials.encode()).decode()
            return f"Basic {encoded}"
        return None

    def _base_headers(self, depth: int) -> Dict[str, str]:
        """Return base headers for all requests."""
        headers = {
            "Content-Type": "application/xml; charset=utf-8",
            "Depth": str(depth),
        }
        if self._auth_header:
            headers["Authorization"] = self._auth_header
        return headers

    def calendar_home_url(self, principal: PrincipalData) -> str:
        return f"{self.base_url}/{principal.user_id}/calendars"

    def calendar_url(self, calendar: CaldavCalendar) -> str:
        return f"{self.base_url}{calendar.path}"

    # =========================================================================
    # Request builders
    # =========================================================================

    def principal_request(self) -> DAVRequest:
        """PROPFIND for the current-user-principal of the base URL."""
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=self.base_url,
            headers=self._base_headers(depth=0),
            body=build_principal_propfind_body(),
        )

    def calendars_request(self, principal: PrincipalData) -> DAVRequest:
        """PROPFIND listing the calendar home of the principal."""
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=self.calendar_home_url(principal),
            headers=self._base_headers(depth=1),
            body=build_calendars_propfind_body(),
        )

    def events_request(self, calendar: CaldavCalendar) -> DAVRequest:
        """calendar-query REPORT fetching the VEVENTs of the calendar."""
        return DAVRequest(
            method=DAVMethod.REPORT,
            url=self.calendar_url(calendar),
            headers=self._base_headers(depth=1),
            body=build_event_query_body(),
        )

    # =========================================================================
    # Response parsers
    # =========================================================================

    def parse_principal(self, response: DAVResponse) -> PrincipalData:
        return parse_principal_response(response.body, huge_tree=self.huge_tree)

    def parse_calendars(self, response: DAVResponse) -> List[CaldavCalendar]:
        return parse_calendars_response(response.body, huge_tree=self.huge_tree)

    def parse_events(self, response: DAVResponse) -> List[CaldavCalendarEvents]:
        return parse_events_response(response.body, huge_tree=self.huge_tree)
