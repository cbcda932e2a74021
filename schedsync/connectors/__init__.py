"""
Connectors for the OAuth2 calendar providers.

Example:

    from schedsync.config import Config
    from schedsync.connectors import get_connector

    connector = get_connector(Oauth2Service.GOOGLE, Config.from_env())
    integration = await connector.refresh(integration, store)
    calendars = await connector.list_calendars(integration)
"""
from typing import Optional
from typing import Union

import httpx

from .base import Oauth2ServiceConnector
from .callback import Oauth2Callback
from .google import GoogleConnector
from .outlook import OutlookConnector
from schedsync.config import Config
from schedsync.models import Oauth2Service

_connectors = {
    Oauth2Service.GOOGLE: GoogleConnector,
    Oauth2Service.OUTLOOK: OutlookConnector,
}


def get_connector(
    service: Union[Oauth2Service, str],
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Oauth2ServiceConnector:
    """
    The connector for a service, given either as Oauth2Service or by
    its name.  Raises UnknownService for an unknown name.
    """
    if not isinstance(service, Oauth2Service):
        service = Oauth2Service.from_name(service)
    return _connectors[service](config.for_service(service), transport=transport)


__all__ = [
    "GoogleConnector",
    "Oauth2Callback",
    "Oauth2ServiceConnector",
    "OutlookConnector",
    "get_connector",
]
