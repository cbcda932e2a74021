from datetime import datetime
from datetime import timezone
from typing import List

import pytest

from schedsync.config import Oauth2Config
from schedsync.models import Integration
from schedsync.models import Oauth2Service
from schedsync.models import OauthIntegration
from schedsync.models import ServiceType

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """IntegrationStore keeping everything in lists, for tests"""

    def __init__(self) -> None:
        self.integrations: List[Integration] = []
        self.oauth_integrations: List[OauthIntegration] = []
        self.saved: List[OauthIntegration] = []

    def create_integration(self, group_id: int, service: ServiceType) -> Integration:
        integration = Integration(
            id=len(self.integrations) + 1, group_id=group_id, service=service
        )
        self.integrations.append(integration)
        return integration

    def create_oauth_integration(
        self,
        integration: Integration,
        service: Oauth2Service,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> OauthIntegration:
        oauth_integration = OauthIntegration(
            id=len(self.oauth_integrations) + 1,
            integration_id=integration.id,
            service=service,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        self.oauth_integrations.append(oauth_integration)
        return oauth_integration

    def save_oauth_integration(self, integration: OauthIntegration) -> OauthIntegration:
        self.saved.append(integration)
        return integration


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def now() -> datetime:
    return T0


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def google_config() -> Oauth2Config:
    return Oauth2Config.google(
        {
            "GOOGLE_CLIENT_ID": "google-client",
            "GOOGLE_CLIENT_SECRET": "google-secret",
            "GOOGLE_REDIRECT_URI": "https://app.example.com/oauth2/google/callback",
            "GOOGLE_SCOPES": "https://www.googleapis.com/auth/calendar.readonly",
        }
    )


@pytest.fixture
def outlook_config() -> Oauth2Config:
    return Oauth2Config.outlook(
        {
            "OUTLOOK_CLIENT_ID": "outlook-client",
            "OUTLOOK_CLIENT_SECRET": "outlook-secret",
            "OUTLOOK_REDIRECT_URI": "https://app.example.com/oauth2/outlook/callback",
            "OUTLOOK_SCOPES": "offline_access Calendars.Read",
        }
    )


@pytest.fixture
def google_integration() -> OauthIntegration:
    return OauthIntegration(
        id=7,
        integration_id=3,
        service=Oauth2Service.GOOGLE,
        access_token="old-access",
        refresh_token="the-refresh-token",
        expires_at=T0,
    )
