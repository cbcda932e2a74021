#!/usr/bin/env python
"""
Completion of the OAuth2 authorization code flow.

After the user gave consent, the provider redirects to our callback
with a ``code`` in the query.  The code is exchanged at the token
endpoint of the provider for an access token and a refresh token, which
are then stored as a new OauthIntegration.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional

import httpx

from .base import Clock
from .base import expect_ok
from .base import expires_in_seconds
from .base import json_object
from .base import required_str
from .base import send
from schedsync.config import Oauth2Config
from schedsync.lib import error
from schedsync.models import IntegrationStore
from schedsync.models import Oauth2Service
from schedsync.models import OauthIntegration
from schedsync.models import ServiceType
from schedsync.models import utcnow

log = logging.getLogger(__name__)


@dataclass
class Oauth2Callback:
    """
    The redirect back from the consent page.  ``state`` is the value
    given to authorization_url; the caller uses it to find the group
    the integration is made for.
    """

    code: str
    service: Oauth2Service
    state: str

    @classmethod
    def from_query(
        cls, service_name: str, query: Mapping[str, Any]
    ) -> "Oauth2Callback":
        """
        Build the callback from the route segment naming the service and
        the query parameters of the redirect.

        Raises:
            UnknownService: the service name is not known
            CallbackError: there is no code or no state in the query
        """
        service = Oauth2Service.from_name(service_name)
        code = query.get("code")
        if not isinstance(code, str) or not code:
            raise error.CallbackError(reason="missing code in %s callback" % service)
        state = query.get("state")
        if not isinstance(state, str) or not state.strip():
            raise error.CallbackError(reason="missing state in %s callback" % service)
        return cls(code=code, service=service, state=state)

    def get_params(self, config: Oauth2Config) -> Dict[str, str]:
        """The form to post to the token endpoint"""
        params = {
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "code": self.code,
            "redirect_uri": config.redirect_uri,
            "grant_type": "authorization_code",
        }
        if self.service is Oauth2Service.GOOGLE:
            params["access_type"] = "offline"
        return params

    async def exchange_code(
        self,
        config: Oauth2Config,
        group_id: int,
        store: IntegrationStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = utcnow,
    ) -> OauthIntegration:
        """
        Exchange the code for the tokens, and store them.  Nothing is
        stored unless the exchange succeeded.

        Raises:
            NetworkError, InvalidStatus, ParseError
        """
        response = await send(
            "POST",
            config.token_url,
            transport=transport,
            data=self.get_params(config),
            headers={"Accept": "application/json"},
        )
        expect_ok(response)
        payload = json_object(response)
        access_token = required_str(payload, "access_token")
        refresh_token = required_str(payload, "refresh_token")
        expires_at = clock() + timedelta(seconds=expires_in_seconds(payload))
        if "scope" in payload:
            log.debug("%s granted scope %s", self.service, payload["scope"])

        integration = store.create_integration(
            group_id, ServiceType.from_oauth2(self.service)
        )
        oauth_integration = store.create_oauth_integration(
            integration,
            self.service,
            access_token,
            refresh_token,
            expires_at,
        )
        log.debug(
            "created %s integration %s for group %s",
            self.service,
            integration.id,
            group_id,
        )
        return oauth_integration
