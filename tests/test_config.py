"""
Tests for stream_gateway.config (pydantic models and the gateway.yml loader).
"""

import pytest

from stream_gateway.config.loader import flag_env_key, parse_bool
from stream_gateway.config.models import GatewaySettings


class TestGatewaySettingsDefaults:
    """GatewaySettings() with no args should match the defaults dict in loader.py."""

    def test_default_flags(self):
        s = GatewaySettings()
        assert s.settings.isAppStreamEnabled is False

    def test_default_appstream(self):
        s = GatewaySettings()
        assert s.appstream.browser_application_id == "firefox"
        assert s.appstream.terminal_application_id == "terminal"
        assert s.appstream.remote_desktop_application_id == "mstsc"
        assert s.appstream.ssh_user == "ec2-user"
        assert s.appstream.stacks == {}

    def test_default_aws(self):
        s = GatewaySettings()
        assert s.aws.region == "us-east-1"
        assert s.aws.environment_role_arn == ""
        assert s.aws.circuit_breaker.failure_threshold == 5

    def test_defaults_match_loader(self):
        from stream_gateway.config.loader import DEFAULTS
        assert GatewaySettings.model_validate(DEFAULTS) == GatewaySettings()


class TestGatewaySettingsPartial:

    def test_partial_appstream(self):
        s = GatewaySettings(appstream={"default_stack": "stack-a"})
        assert s.appstream.default_stack == "stack-a"
        assert s.appstream.browser_application_id == "firefox"

    def test_stack_mapping(self):
        s = GatewaySettings(appstream={"stacks": {"env-1": {"stack": "s1", "fleet": "f1"}}})
        assert s.appstream.stacks["env-1"].fleet == "f1"

    def test_extra_flags_kept(self):
        """Unknown flags in the settings section are kept for get_boolean."""
        s = GatewaySettings(settings={"isAppStreamEnabled": True, "enableEgressStore": True})
        assert s.settings.isAppStreamEnabled is True
        assert s.settings.model_extra == {"enableEgressStore": True}

    def test_extra_keys_ignored(self):
        s = GatewaySettings(aws={"region": "eu-west-1", "unknown_key": "ignored"})
        assert s.aws.region == "eu-west-1"


class TestParseBool:

    @pytest.mark.parametrize("value, expected", [
        (True, True), (False, False), ("true", True), ("TRUE", True), ("1", True),
        ("yes", True), ("on", True), ("false", False), ("0", False), ("no", False),
        ("", False), (1, True), (0, False),
    ])
    def test_values(self, value, expected):
        assert parse_bool(value) is expected

    def test_none_uses_default(self):
        assert parse_bool(None, default=True) is True

    def test_garbage_uses_default(self):
        assert parse_bool("maybe", default=False) is False


class TestFlagEnvKey:

    def test_camel_case(self):
        assert flag_env_key("isAppStreamEnabled") == "IS_APP_STREAM_ENABLED"


class TestGatewayConfigLoader:

    def test_missing_file_uses_defaults(self, reset_gateway_config, mocker, tmp_path):
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", tmp_path / "missing.yml")
        config = reset_gateway_config
        assert config.get("aws", "region") == "us-east-1"
        assert config.settings().appstream.ssh_user == "ec2-user"

    def test_yaml_file_merged(self, reset_gateway_config, mocker, tmp_path):
        path = tmp_path / "gateway.yml"
        path.write_text(
            "settings:\n"
            "  isAppStreamEnabled: true\n"
            "appstream:\n"
            "  default_stack: swb-stack\n"
            "  default_fleet: swb-fleet\n"
        )
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", path)
        config = reset_gateway_config

        assert config.settings().appstream.default_stack == "swb-stack"
        assert config.settings().appstream.terminal_application_id == "terminal"
        assert config.get_boolean("isAppStreamEnabled") is True

    def test_invalid_yaml_falls_back(self, reset_gateway_config, mocker, tmp_path):
        path = tmp_path / "gateway.yml"
        path.write_text("settings: [unclosed\n")
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", path)
        assert reset_gateway_config.get_boolean("isAppStreamEnabled") is False

    def test_env_overrides_file(self, reset_gateway_config, mocker, tmp_path, monkeypatch):
        path = tmp_path / "gateway.yml"
        path.write_text("settings:\n  isAppStreamEnabled: true\n")
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", path)
        monkeypatch.setenv("IS_APP_STREAM_ENABLED", "false")
        assert reset_gateway_config.get_boolean("isAppStreamEnabled") is False

    def test_unknown_flag_default(self, reset_gateway_config, mocker, tmp_path):
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", tmp_path / "missing.yml")
        assert reset_gateway_config.get_boolean("noSuchFlag") is False
        assert reset_gateway_config.get_boolean("noSuchFlag", default=True) is True

    def test_get_missing_key(self, reset_gateway_config, mocker, tmp_path):
        mocker.patch("stream_gateway.config.loader.GATEWAY_CONFIG_FILE", tmp_path / "missing.yml")
        assert reset_gateway_config.get("aws", "nope", default="x") == "x"
