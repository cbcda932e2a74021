#!/usr/bin/env python
"""
Common ground of the OAuth2 REST connectors: the token refresh flow,
and the small HTTP helpers the connectors and the callback share.
"""
import logging
from abc import ABC
from abc import abstractmethod
from datetime import datetime
from datetime import timedelta
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import urlencode

import httpx

from schedsync.config import Oauth2Config
from schedsync.lib import error
from schedsync.models import CalendarResult
from schedsync.models import IntegrationStore
from schedsync.models import OauthIntegration
from schedsync.models import utcnow

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


async def send(
    method: str,
    url: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = 30.0,
    **kwargs: Any,
) -> httpx.Response:
    """
    Do one HTTP request in a client of its own.  Transport failures
    are raised as NetworkError.
    """
    log.debug("sending request - method=%s, url=%s", method, url)
    async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as err:
            raise error.NetworkError(url=url, reason=repr(err)) from err
    log.debug("server responded with %i %s", response.status_code, response.reason_phrase)
    return response


def expect_ok(response: httpx.Response) -> None:
    """Raise InvalidStatus unless the response is a 200 OK"""
    if response.status_code != 200:
        raise error.InvalidStatus(
            response.status_code, response.text, url=str(response.request.url)
        )


def json_object(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as err:
        raise error.ParseError(
            url=str(response.request.url), reason="response is not valid JSON"
        ) from err
    if not isinstance(payload, dict):
        raise error.ParseError(
            url=str(response.request.url), reason="expected a JSON object"
        )
    return payload


def required_str(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise error.ParseError(reason="%s missing or not a string" % key)
    return value


def expires_in_seconds(payload: Dict[str, Any]) -> int:
    value = payload.get("expires_in")
    ## bool is an int as well
    if isinstance(value, bool):
        value = None
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise error.ParseError(reason="expires_in missing or not a number") from err


class Oauth2ServiceConnector(ABC):
    """
    One OAuth2 calendar provider.

    The token refresh is the same for every provider and lives here,
    revocation and calendar listing are up to the subclasses.  An
    operation the provider can't do raises an UnsupportedCapability.

    Two refreshes of the same integration running at the same time are
    not serialized, both will hit the token endpoint and the last one
    to finish wins.
    """

    def __init__(
        self,
        config: Oauth2Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = utcnow,
        timeout: Optional[float] = 30.0,
    ) -> None:
        """
        Args:
            config: endpoints and client credentials of the provider
            transport: httpx transport, i.e. an httpx.MockTransport in tests
            clock: returns the current time, used for expires_at
            timeout: seconds before a request is given up
        """
        self.config = config
        self.transport = transport
        self.clock = clock
        self.timeout = timeout

    def get_config(self) -> Oauth2Config:
        return self.config

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await send(
            method, url, transport=self.transport, timeout=self.timeout, **kwargs
        )

    def authorization_url(self, state: str) -> str:
        """The consent page the user should be redirected to"""
        config = self.get_config()
        params = [
            ("client_id", config.client_id),
            ("prompt", "consent"),
            ("redirect_uri", config.redirect_uri),
            ("response_type", "code"),
            ("access_type", "offline"),
            ("scope", config.scope),
            ("state", state),
        ]
        return "%s?%s" % (config.authorization_url, urlencode(params))

    async def refresh(
        self, integration: OauthIntegration, store: IntegrationStore
    ) -> OauthIntegration:
        """
        Get a new access token using the refresh token of the
        integration.  The integration is updated in place, saved
        through the store and returned.

        Raises:
            NetworkError, InvalidStatus, ParseError
        """
        config = self.get_config()
        response = await self._send(
            "POST",
            config.token_url,
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "refresh_token": integration.refresh_token,
                "grant_type": "refresh_token",
            },
            headers={"Accept": "application/json"},
        )
        expect_ok(response)
        payload = json_object(response)
        access_token = required_str(payload, "access_token")
        expires_in = expires_in_seconds(payload)

        integration.access_token = access_token
        integration.expires_at = self.clock() + timedelta(seconds=expires_in)
        ## some providers hand out a new refresh token on every refresh
        refresh_token = payload.get("refresh_token")
        if isinstance(refresh_token, str) and refresh_token:
            integration.refresh_token = refresh_token
        log.debug(
            "refreshed oauth integration %s, expires at %s",
            integration.id,
            integration.expires_at,
        )
        return store.save_oauth_integration(integration)

    @abstractmethod
    async def revoke(self, integration: OauthIntegration) -> None:
        """Revoke the access token of the integration"""
        ...

    @abstractmethod
    async def list_calendars(self, integration: OauthIntegration) -> List[CalendarResult]:
        ...
