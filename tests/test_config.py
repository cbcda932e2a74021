import json
from datetime import timedelta

import pytest

from schedsync.config import Config
from schedsync.config import GOOGLE_ENDPOINTS
from schedsync.config import Oauth2Config
from schedsync.config import read_config
from schedsync.lib import error
from schedsync.models import Oauth2Service
from schedsync.models import ServiceType

environment = {
    "GOOGLE_CLIENT_ID": "gid",
    "GOOGLE_CLIENT_SECRET": "gsecret",
    "GOOGLE_REDIRECT_URI": "https://app.example.com/g",
    "GOOGLE_SCOPES": "calendar",
    "OUTLOOK_CLIENT_ID": "oid",
    "OUTLOOK_CLIENT_SECRET": "osecret",
    "OUTLOOK_REDIRECT_URI": "https://app.example.com/o",
    "OUTLOOK_SCOPES": "offline_access Calendars.Read",
}


class TestConfig:
    def test_from_env(self):
        config = Config.from_env(environment)
        assert config.google.client_id == "gid"
        assert config.google.token_url == GOOGLE_ENDPOINTS["token_url"]
        assert config.outlook.scope == "offline_access Calendars.Read"
        assert config.for_service(Oauth2Service.GOOGLE) is config.google
        assert config.for_service(Oauth2Service.OUTLOOK) is config.outlook

    def test_from_os_environ(self, monkeypatch):
        for key, value in environment.items():
            monkeypatch.setenv(key, value)
        assert Oauth2Config.outlook().client_secret == "osecret"

    @pytest.mark.parametrize("missing", ["GOOGLE_CLIENT_SECRET", "OUTLOOK_SCOPES"])
    def test_missing_key(self, missing):
        environ = dict(environment)
        del environ[missing]
        with pytest.raises(error.ConfigurationError) as excinfo:
            Config.from_env(environ)
        assert missing in excinfo.value.reason

    def test_empty_value(self):
        environ = dict(environment, GOOGLE_CLIENT_ID="")
        with pytest.raises(error.ConfigurationError):
            Config.from_env(environ)


class TestReadConfig:
    def test_json(self, tmp_path):
        fn = tmp_path / "schedsync.json"
        fn.write_text(json.dumps(environment))
        assert read_config(str(fn)) == environment
        assert Config.from_file(str(fn)).outlook.client_id == "oid"

    def test_yaml(self, tmp_path):
        pytest.importorskip("yaml")
        fn = tmp_path / "schedsync.yaml"
        fn.write_text("".join("%s: %s\n" % item for item in environment.items()))
        assert read_config(str(fn)) == environment

    def test_missing_file(self, tmp_path):
        fn = str(tmp_path / "nothing-here.json")
        assert read_config(fn) is None
        with pytest.raises(error.ConfigurationError):
            Config.from_file(fn)


class TestModels:
    def test_service_names(self):
        assert Oauth2Service.from_name("google") is Oauth2Service.GOOGLE
        assert str(Oauth2Service.OUTLOOK) == "outlook"
        with pytest.raises(error.UnknownService):
            Oauth2Service.from_name("GOOGLE")

    def test_service_type(self):
        assert ServiceType.from_oauth2(Oauth2Service.GOOGLE) == 1
        assert ServiceType.from_oauth2(Oauth2Service.OUTLOOK) == 2
        assert ServiceType.APPLE == 3

    def test_is_expired(self, google_integration, now):
        assert google_integration.is_expired(now)
        assert not google_integration.is_expired(now - timedelta(seconds=1))
