#!/usr/bin/env python
"""
Records exchanged between the connectors and the persistence layer.

The persistence layer itself lives outside of this package; it is seen
through the IntegrationStore protocol only.
"""
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from enum import Enum
from enum import IntEnum
from typing import Optional
from typing import Protocol

from schedsync.lib import error


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Oauth2Service(Enum):
    GOOGLE = "google"
    OUTLOOK = "outlook"

    @classmethod
    def from_name(cls, name: str) -> "Oauth2Service":
        """
        Look up a service by the name used in the callback route,
        i.e. "google".  Raises UnknownService for anything else.
        """
        try:
            return cls(name)
        except ValueError:
            raise error.UnknownService(reason="unknown OAuth2 service %r" % name)

    def __str__(self) -> str:
        return self.value


class ServiceType(IntEnum):
    """The kind of an integration, stored as a small int"""

    GOOGLE = 1
    OUTLOOK = 2
    APPLE = 3

    @classmethod
    def from_oauth2(cls, service: Oauth2Service) -> "ServiceType":
        return {
            Oauth2Service.GOOGLE: cls.GOOGLE,
            Oauth2Service.OUTLOOK: cls.OUTLOOK,
        }[service]


@dataclass
class Integration:
    id: int
    group_id: int
    service: ServiceType


@dataclass
class OauthIntegration:
    """
    The token set of one OAuth2 integration.  The connectors update
    access_token and expires_at in place when refreshing.
    """

    id: int
    integration_id: int
    service: Oauth2Service
    access_token: str
    refresh_token: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at


@dataclass
class CalendarResult:
    """A calendar as listed by one of the REST services"""

    external_id: str
    name: str
    background_color: str
    foreground_color: str


class IntegrationStore(Protocol):
    """
    What the connectors need from the persistence layer.  The methods
    are plain (blocking) calls.
    """

    def create_integration(self, group_id: int, service: ServiceType) -> Integration:
        ...

    def create_oauth_integration(
        self,
        integration: Integration,
        service: Oauth2Service,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> OauthIntegration:
        ...

    def save_oauth_integration(self, integration: OauthIntegration) -> OauthIntegration:
        ...
