import json
import logging
import os
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional

from schedsync.lib import error
from schedsync.models import Oauth2Service

"""
Configuration of the OAuth2 services.

The endpoints of the services are fixed, the client credentials, the
redirect URI and the scopes are taken from the environment:

    GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI, GOOGLE_SCOPES
    OUTLOOK_CLIENT_ID, OUTLOOK_CLIENT_SECRET, OUTLOOK_REDIRECT_URI, OUTLOOK_SCOPES

The same keys may be given in a json (or yaml) file, see read_config.
"""


GOOGLE_ENDPOINTS = {
    "authorization_url": "https://accounts.google.com/o/oauth2/auth",
    "token_url": "https://oauth2.googleapis.com/token",
    "revoke_url": "https://accounts.google.com/o/oauth2/revoke",
}

OUTLOOK_ENDPOINTS = {
    "authorization_url": "https://login.microsoftonline.com/consumers/oauth2/v2.0/authorize",
    "token_url": "https://login.microsoftonline.com/consumers/oauth2/v2.0/token",
    "revoke_url": "https://login.microsoftonline.com/consumers/oauth2/v2.0/revoke",
}

## config attribute -> suffix of the environment variable
_ENV_SUFFIXES = {
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "redirect_uri": "REDIRECT_URI",
    "scope": "SCOPES",
}


@dataclass
class Oauth2Config:
    authorization_url: str
    token_url: str
    revoke_url: str
    client_id: str
    client_secret: str
    redirect_uri: str
    scope: str

    @classmethod
    def _from_environ(
        cls,
        prefix: str,
        endpoints: Dict[str, str],
        environ: Optional[Mapping[str, Any]] = None,
    ) -> "Oauth2Config":
        if environ is None:
            environ = os.environ
        values = dict(endpoints)
        for attr, suffix in _ENV_SUFFIXES.items():
            key = "%s_%s" % (prefix, suffix)
            value = environ.get(key)
            if value is None or value == "":
                raise error.ConfigurationError(reason="%s must be set" % key)
            values[attr] = str(value)
        return cls(**values)

    @classmethod
    def google(cls, environ: Optional[Mapping[str, Any]] = None) -> "Oauth2Config":
        return cls._from_environ("GOOGLE", GOOGLE_ENDPOINTS, environ)

    @classmethod
    def outlook(cls, environ: Optional[Mapping[str, Any]] = None) -> "Oauth2Config":
        return cls._from_environ("OUTLOOK", OUTLOOK_ENDPOINTS, environ)


@dataclass
class Config:
    google: Oauth2Config
    outlook: Oauth2Config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, Any]] = None) -> "Config":
        """
        Build the configuration of all services.  Raises
        ConfigurationError if anything is missing, this is meant to
        happen at startup.
        """
        return cls(
            google=Oauth2Config.google(environ),
            outlook=Oauth2Config.outlook(environ),
        )

    @classmethod
    def from_file(cls, fn: str) -> "Config":
        data = read_config(fn)
        if not data:
            raise error.ConfigurationError(reason="no usable configuration in %s" % fn)
        return cls.from_env(data)

    def for_service(self, service: Oauth2Service) -> Oauth2Config:
        if service is Oauth2Service.GOOGLE:
            return self.google
        return self.outlook


def read_config(fn: str) -> Optional[Dict[str, Any]]:
    """
    Load a json file, falling back to yaml if pyyaml is installed.
    Returns None if the file does not exist or can't be parsed.
    """
    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is an optional
            ## dependency.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        ## File not found
        logging.info("no config file found at %s", fn)
    return None
