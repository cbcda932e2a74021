#!/usr/bin/env python
import logging
from collections import defaultdict
from typing import Dict
from typing import Optional
from typing import Type

log = logging.getLogger("schedsync")


def errmsg(status: int, body: str) -> str:
    """Utility for formatting an error response to an error string"""
    return "HTTP status %s\n\n%s" % (status, body)


class SchedSyncError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class ConfigurationError(SchedSyncError):
    """
    A required configuration value is missing.  Raised while the
    configuration is built, i.e. at startup.
    """

    pass


class NetworkError(SchedSyncError):
    """
    The request never produced an HTTP response (DNS, connection
    refused, TLS failure, timeout ...).  The transport exception is
    chained as __cause__.
    """

    pass


class InvalidStatus(SchedSyncError):
    """
    The remote service answered with an HTTP status we did not expect.
    The status property holds the status code, the body property
    whatever text the service sent along.
    """

    status: int = 0
    body: str = ""

    def __init__(
        self,
        status: int,
        body: str = "",
        url: Optional[str] = None,
    ) -> None:
        self.status = status
        self.body = body
        super().__init__(url=url, reason=errmsg(status, body))


class UnexpectedStatus(InvalidStatus):
    """A CalDAV request did not return 207 Multi-Status"""

    pass


class PropfindError(UnexpectedStatus):
    pass


class ReportError(UnexpectedStatus):
    pass


class ParseError(SchedSyncError):
    """
    The response body does not have the expected shape (broken JSON,
    broken XML, missing fields).
    """

    pass


class SerializationError(SchedSyncError):
    """Failure while encoding a request body to XML"""

    cause: Optional[BaseException] = None

    def __init__(
        self, reason: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> None:
        self.cause = cause
        super().__init__(reason=reason or repr(cause))


class DeserializationError(ParseError):
    """Failure while decoding an XML response body"""

    cause: Optional[BaseException] = None

    def __init__(
        self, reason: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> None:
        self.cause = cause
        super().__init__(reason=reason or repr(cause))


class MissingRequiredProperty(SchedSyncError):
    """
    A VEVENT lacks one of UID, CREATED, SUMMARY, DTSTART or DTEND.
    The name property holds the iCalendar property name.
    """

    name: str = ""

    def __init__(self, name: str, url: Optional[str] = None) -> None:
        self.name = name
        super().__init__(url=url, reason="missing required property %s" % name)


class EmptyResponse(SchedSyncError):
    """The multistatus body did not contain any response element"""

    pass


class EmptyResultSet(SchedSyncError):
    """
    After dropping the unusable elements of a multistatus response,
    nothing was left.  Remark that an empty calendar ends up here as
    well.
    """

    pass


class MalformedPrincipalPath(SchedSyncError):
    pass


class UnsupportedCapability(SchedSyncError):
    """The provider cannot do what was asked for"""

    pass


class TokenRevocationUnsupported(UnsupportedCapability):
    pass


class UnknownService(SchedSyncError):
    pass


class CallbackError(SchedSyncError):
    """The OAuth2 callback query lacks the authorization code"""

    pass


exception_by_method: Dict[str, Type[UnexpectedStatus]] = defaultdict(
    lambda: UnexpectedStatus
)
for method in ("propfind", "report"):
    exception_by_method[method] = locals()[method[0].upper() + method[1:] + "Error"]
