#!/usr/bin/env python
"""
Async CalDAV client for discovering the principal, the calendars and the
events of a CalDAV account (iCloud and friends).

The client is a thin combination of the Sans-I/O protocol layer in
schedsync.protocol and the httpx based shell in schedsync.io.  Credentials
are given on every call, the client itself holds no session, no cookies
and no connection pool, so one client may serve many accounts at once.

Example:

    client = AsyncDAVClient()
    principal = await client.discover_principal(url, username, password)
    calendars = await client.discover_calendars(principal, url, username, password)
    for calendar in calendars:
        objects = await client.list_events(calendar, url, username, password)
"""
import logging
import sys
from types import TracebackType
from typing import List
from typing import Optional
from typing import Type

import httpx

from schedsync.io import AsyncIO
from schedsync.lib import error
from schedsync.protocol import CalDAVProtocol
from schedsync.protocol import CaldavCalendar
from schedsync.protocol import CaldavCalendarEvents
from schedsync.protocol import DAVRequest
from schedsync.protocol import DAVResponse
from schedsync.protocol import PrincipalData

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger(__name__)


class AsyncDAVClient:
    """
    Basic client for the CalDAV discovery and read operations.

    Every operation requires a 207 Multi-Status answer, anything else
    is raised as the PropfindError or ReportError matching the method.
    """

    def __init__(
        self,
        timeout: Optional[float] = 30.0,
        ssl_verify_cert: bool = True,
        huge_tree: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            timeout: seconds before a request is given up (None to wait forever)
            ssl_verify_cert: verify the server certificate
            huge_tree: allow very large XML responses (big calendars)
            transport: httpx transport, i.e. an httpx.MockTransport in tests
        """
        self.huge_tree = huge_tree
        self.io = AsyncIO(timeout=timeout, verify_ssl=ssl_verify_cert, transport=transport)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        pass

    def _protocol(
        self, base_url: str, username: Optional[str], password: Optional[str]
    ) -> CalDAVProtocol:
        return CalDAVProtocol(base_url, username, password, huge_tree=self.huge_tree)

    async def _execute(self, request: DAVRequest) -> DAVResponse:
        response = await self.io.execute(request)
        if not response.is_multistatus:
            method = request.method.value.lower()
            raise error.exception_by_method[method](
                response.status, response.text, url=request.url
            )
        return response

    async def discover_principal(
        self, base_url: str, username: str, password: str
    ) -> PrincipalData:
        """
        Find the current-user-principal for the account.

        Raises:
            PropfindError: the server did not answer 207
            EmptyResponse: the multistatus holds no response
            MalformedPrincipalPath: no user id could be taken from the href
        """
        protocol = self._protocol(base_url, username, password)
        response = await self._execute(protocol.principal_request())
        principal = protocol.parse_principal(response)
        log.debug("found principal %s for %s", principal.path, base_url)
        return principal

    async def discover_calendars(
        self,
        principal: PrincipalData,
        base_url: str,
        username: str,
        password: str,
    ) -> List[CaldavCalendar]:
        """
        List the calendar collections in the calendar home of the principal.
        Collections that aren't calendars and entries the server did not
        answer with 200 OK are left out.
        """
        protocol = self._protocol(base_url, username, password)
        response = await self._execute(protocol.calendars_request(principal))
        calendars = protocol.parse_calendars(response)
        log.debug("found %i calendar(s) for %s", len(calendars), principal.path)
        return calendars

    async def list_events(
        self,
        calendar: CaldavCalendar,
        base_url: str,
        username: str,
        password: str,
    ) -> List[CaldavCalendarEvents]:
        """
        Fetch the VEVENTs of a calendar, grouped per calendar object
        resource.

        Raises:
            ReportError: the server did not answer 207
            EmptyResultSet: no usable calendar object in the answer
        """
        protocol = self._protocol(base_url, username, password)
        response = await self._execute(protocol.events_request(calendar))
        objects = protocol.parse_events(response)
        log.debug(
            "found %i calendar object(s) in %s", len(objects), calendar.path
        )
        return objects


async def get_principal(
    base_url: str,
    username: str,
    password: str,
    client: Optional[AsyncDAVClient] = None,
) -> PrincipalData:
    """Shortcut for AsyncDAVClient().discover_principal"""
    client = client or AsyncDAVClient()
    return await client.discover_principal(base_url, username, password)


async def get_calendars(
    principal: PrincipalData,
    base_url: str,
    username: str,
    password: str,
    client: Optional[AsyncDAVClient] = None,
) -> List[CaldavCalendar]:
    """Shortcut for AsyncDAVClient().discover_calendars"""
    client = client or AsyncDAVClient()
    return await client.discover_calendars(principal, base_url, username, password)


async def get_events(
    calendar: CaldavCalendar,
    base_url: str,
    username: str,
    password: str,
    client: Optional[AsyncDAVClient] = None,
) -> List[CaldavCalendarEvents]:
    """Shortcut for AsyncDAVClient().list_events"""
    client = client or AsyncDAVClient()
    return await client.list_events(calendar, base_url, username, password)
