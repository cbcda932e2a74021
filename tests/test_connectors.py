#!/usr/bin/env python
"""
Unit tests for the OAuth2 connectors.  The provider endpoints are
emulated through an httpx.MockTransport.
"""
from datetime import timedelta
from typing import List
from urllib.parse import parse_qsl
from urllib.parse import urlsplit

import httpx
import pytest

from schedsync.config import Config
from schedsync.connectors import get_connector
from schedsync.connectors import GoogleConnector
from schedsync.connectors import OutlookConnector
from schedsync.connectors.google import CALENDAR_LIST_URL
from schedsync.lib import error
from schedsync.models import CalendarResult
from schedsync.models import Oauth2Service


def form(request: httpx.Request) -> dict:
    return dict(parse_qsl(request.content.decode("utf-8")))


def calendar_item(n: int) -> dict:
    return {
        "kind": "calendar#calendarListEntry",
        "id": "cal-%i@group.calendar.google.com" % n,
        "summary": "Calendar %i" % n,
        "backgroundColor": "#%06x" % n,
        "foregroundColor": "#000000",
        "accessRole": "owner",
    }


class PagedCalendarList:
    """
    Google calendar list endpoint handing out the given pages.  A page
    is a (status, json) tuple.
    """

    def __init__(self, pages) -> None:
        self.pages = pages
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = len(self.requests) - 1
        status, payload = self.pages[index]
        body = dict(payload)
        if index < len(self.pages) - 1 and status == 200:
            body["nextPageToken"] = "page-%i" % (index + 1)
        return httpx.Response(status, json=body)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh(self, google_config, google_integration, store, clock, now):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={"access_token": "new", "expires_in": 3600, "token_type": "Bearer"},
            )

        connector = GoogleConnector(
            google_config, transport=httpx.MockTransport(handler), clock=clock
        )
        integration = await connector.refresh(google_integration, store)

        assert integration is google_integration
        assert integration.access_token == "new"
        assert integration.expires_at == now + timedelta(seconds=3600)
        assert integration.refresh_token == "the-refresh-token"
        assert store.saved == [integration]
        assert not integration.is_expired(now)
        assert integration.is_expired(now + timedelta(seconds=3600))

        (request,) = requests
        assert request.method == "POST"
        assert str(request.url) == "https://oauth2.googleapis.com/token"
        assert form(request) == {
            "client_id": "google-client",
            "client_secret": "google-secret",
            "refresh_token": "the-refresh-token",
            "grant_type": "refresh_token",
        }

    @pytest.mark.asyncio
    async def test_rotated_refresh_token(
        self, outlook_config, google_integration, store, clock
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url).startswith("https://login.microsoftonline.com/")
            return httpx.Response(
                200,
                json={"access_token": "new", "expires_in": 60, "refresh_token": "rotated"},
            )

        connector = OutlookConnector(
            outlook_config, transport=httpx.MockTransport(handler), clock=clock
        )
        integration = await connector.refresh(google_integration, store)
        assert integration.refresh_token == "rotated"

    @pytest.mark.asyncio
    async def test_invalid_status(self, google_config, google_integration, store, now):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        connector = GoogleConnector(google_config, transport=httpx.MockTransport(handler))
        with pytest.raises(error.InvalidStatus) as excinfo:
            await connector.refresh(google_integration, store)
        assert excinfo.value.status == 400
        assert "invalid_grant" in excinfo.value.body
        assert google_integration.access_token == "old-access"
        assert google_integration.expires_at == now
        assert store.saved == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            b"<html>oops</html>",
            b"[]",
            b'{"expires_in": 3600}',
            b'{"access_token": "new"}',
            b'{"access_token": "new", "expires_in": "soon"}',
        ],
    )
    async def test_malformed_body(self, google_config, google_integration, store, content):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=content)

        connector = GoogleConnector(google_config, transport=httpx.MockTransport(handler))
        with pytest.raises(error.ParseError):
            await connector.refresh(google_integration, store)
        assert store.saved == []

    @pytest.mark.asyncio
    async def test_network_error(self, google_config, google_integration, store):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        connector = GoogleConnector(google_config, transport=httpx.MockTransport(handler))
        with pytest.raises(error.NetworkError):
            await connector.refresh(google_integration, store)


class TestGoogle:
    @pytest.mark.asyncio
    async def test_revoke(self, google_config, google_integration):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        connector = GoogleConnector(google_config, transport=httpx.MockTransport(handler))
        await connector.revoke(google_integration)

        (request,) = requests
        assert request.method == "POST"
        assert request.url.path == "/o/oauth2/revoke"
        assert request.url.params["token"] == "old-access"
        assert form(request) == {
            "client_id": "google-client",
            "client_secret": "google-secret",
        }

    @pytest.mark.asyncio
    async def test_revoke_failed(self, google_config, google_integration):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="invalid_token")

        connector = GoogleConnector(google_config, transport=httpx.MockTransport(handler))
        with pytest.raises(error.InvalidStatus) as excinfo:
            await connector.revoke(google_integration)
        assert excinfo.value.body == "invalid_token"

    @pytest.mark.asyncio
    async def test_pagination(self, google_config, google_integration):
        endpoint = PagedCalendarList(
            [
                (200, {"items": [calendar_item(1), calendar_item(2)]}),
                (200, {"items": [calendar_item(3), calendar_item(4)]}),
                (200, {"items": [calendar_item(5)]}),
            ]
        )
        connector = GoogleConnector(google_config, transport=httpx.MockTransport(endpoint))
        calendars = await connector.list_calendars(google_integration)

        assert [c.external_id for c in calendars] == [
            "cal-%i@group.calendar.google.com" % n for n in range(1, 6)
        ]
        assert calendars[0] == CalendarResult(
            external_id="cal-1@group.calendar.google.com",
            name="Calendar 1",
            background_color="#000001",
            foreground_color="#000000",
        )

        assert len(endpoint.requests) == 3
        first, second, third = endpoint.requests
        assert "pageToken" not in first.url.params
        assert second.url.params["pageToken"] == "page-1"
        assert third.url.params["pageToken"] == "page-2"
        for request in endpoint.requests:
            assert request.method == "GET"
            assert "https://%s%s" % (request.url.host, request.url.path) == (
                CALENDAR_LIST_URL
            )
            assert request.headers["Authorization"] == "Bearer old-access"

    @pytest.mark.asyncio
    async def test_single_empty_page(self, google_config, google_integration):
        endpoint = PagedCalendarList([(200, {"kind": "calendar#calendarList"})])
        connector = GoogleConnector(google_config, transport=httpx.MockTransport(endpoint))
        assert await connector.list_calendars(google_integration) == []

    @pytest.mark.asyncio
    async def test_failure_halfway(self, google_config, google_integration):
        endpoint = PagedCalendarList(
            [
                (200, {"items": [calendar_item(1), calendar_item(2)]}),
                (401, {"error": {"code": 401, "message": "Invalid Credentials"}}),
                (200, {"items": [calendar_item(5)]}),
            ]
        )
        connector = GoogleConnector(google_config, transport=httpx.MockTransport(endpoint))
        with pytest.raises(error.InvalidStatus) as excinfo:
            await connector.list_calendars(google_integration)
        assert excinfo.value.status == 401
        assert len(endpoint.requests) == 2

    @pytest.mark.asyncio
    async def test_malformed_page(self, google_config, google_integration):
        endpoint = PagedCalendarList(
            [
                (200, {"items": [calendar_item(1)]}),
                (200, {"items": [{"summary": "no id"}]}),
            ]
        )
        connector = GoogleConnector(google_config, transport=httpx.MockTransport(endpoint))
        with pytest.raises(error.ParseError):
            await connector.list_calendars(google_integration)

    def test_authorization_url(self, google_config):
        url = GoogleConnector(google_config).authorization_url("some-state")
        parts = urlsplit(url)
        assert "%s://%s%s" % (parts.scheme, parts.netloc, parts.path) == (
            "https://accounts.google.com/o/oauth2/auth"
        )
        assert parse_qsl(parts.query) == [
            ("client_id", "google-client"),
            ("prompt", "consent"),
            ("redirect_uri", "https://app.example.com/oauth2/google/callback"),
            ("response_type", "code"),
            ("access_type", "offline"),
            ("scope", "https://www.googleapis.com/auth/calendar.readonly"),
            ("state", "some-state"),
        ]


class TestOutlook:
    @pytest.mark.asyncio
    async def test_revoke_unsupported(self, outlook_config, google_integration):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        connector = OutlookConnector(outlook_config, transport=httpx.MockTransport(handler))
        with pytest.raises(error.TokenRevocationUnsupported):
            await connector.revoke(google_integration)
        with pytest.raises(error.UnsupportedCapability):
            await connector.revoke(google_integration)

    @pytest.mark.asyncio
    async def test_list_calendars(self, outlook_config, google_integration):
        connector = OutlookConnector(outlook_config)
        assert await connector.list_calendars(google_integration) == []


class TestGetConnector:
    def test_by_service(self, google_config, outlook_config):
        config = Config(google=google_config, outlook=outlook_config)
        connector = get_connector(Oauth2Service.GOOGLE, config)
        assert isinstance(connector, GoogleConnector)
        assert connector.get_config() is google_config

    def test_by_name(self, google_config, outlook_config):
        config = Config(google=google_config, outlook=outlook_config)
        connector = get_connector("outlook", config)
        assert isinstance(connector, OutlookConnector)
        assert connector.get_config() is outlook_config

    def test_unknown(self, google_config, outlook_config):
        config = Config(google=google_config, outlook=outlook_config)
        with pytest.raises(error.UnknownService):
            get_connector("yahoo", config)
