#!/usr/bin/env python
import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from .base import expect_ok
from .base import json_object
from .base import Oauth2ServiceConnector
from schedsync.lib import error
from schedsync.models import CalendarResult
from schedsync.models import OauthIntegration

log = logging.getLogger(__name__)

CALENDAR_LIST_URL = "https://www.googleapis.com/calendar/v3/users/me/calendarList"


def _calendar_result(item: Any) -> CalendarResult:
    if not isinstance(item, dict):
        raise error.ParseError(reason="calendar list item is not an object")
    try:
        return CalendarResult(
            external_id=str(item["id"]),
            name=str(item["summary"]),
            background_color=str(item.get("backgroundColor", "")),
            foreground_color=str(item.get("foregroundColor", "")),
        )
    except KeyError as err:
        raise error.ParseError(reason="calendar list item lacks %s" % err) from err


class GoogleConnector(Oauth2ServiceConnector):
    async def revoke(self, integration: OauthIntegration) -> None:
        config = self.get_config()
        response = await self._send(
            "POST",
            config.revoke_url,
            params={"token": integration.access_token},
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
            },
        )
        expect_ok(response)
        log.debug("revoked access token of oauth integration %s", integration.id)

    async def _calendar_page(
        self, integration: OauthIntegration, page_token: Optional[str]
    ) -> Dict[str, Any]:
        params = {"pageToken": page_token} if page_token is not None else None
        response = await self._send(
            "GET",
            CALENDAR_LIST_URL,
            params=params,
            headers={"Authorization": "Bearer %s" % integration.access_token},
        )
        expect_ok(response)
        return json_object(response)

    async def list_calendars(self, integration: OauthIntegration) -> List[CalendarResult]:
        """
        All calendars in the calendar list of the user.  Google hands
        them out page by page, the pages are fetched one after the other
        until one comes without a nextPageToken.  If any page fails,
        the whole listing fails.
        """
        results: List[CalendarResult] = []
        page_token: Optional[str] = None
        while True:
            page = await self._calendar_page(integration, page_token)
            items = page.get("items", [])
            if not isinstance(items, list):
                raise error.ParseError(
                    url=CALENDAR_LIST_URL, reason="items is not a list"
                )
            results.extend(_calendar_result(item) for item in items)
            page_token = page.get("nextPageToken")
            if not page_token:
                break
        log.debug("found %i calendar(s) in the google calendar list", len(results))
        return results
