#!/usr/bin/env python
import logging
from typing import List

from .base import Oauth2ServiceConnector
from schedsync.lib import error
from schedsync.models import CalendarResult
from schedsync.models import OauthIntegration

log = logging.getLogger(__name__)


class OutlookConnector(Oauth2ServiceConnector):
    async def revoke(self, integration: OauthIntegration) -> None:
        raise error.TokenRevocationUnsupported(
            url=self.get_config().revoke_url,
            reason="outlook does not support token revocation",
        )

    async def list_calendars(self, integration: OauthIntegration) -> List[CalendarResult]:
        """Not implemented for Outlook yet, always gives an empty list"""
        log.debug("calendar listing not implemented for outlook")
        return []
