"""
Unit tests for configuration classes
Tests the Pydantic models, YAML loading and environment overrides
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from goveehub.config import MqttConfig, PollingConfig, LoggingConfig, HubConfig
from goveehub.config_manager import ConfigurationManager
from goveehub.main import _resolve_config_path


class TestMqttConfig:
    """Test MQTT configuration"""

    def test_default_values(self):
        """Test default MQTT configuration values"""
        config = MqttConfig(host="localhost")

        assert config.host == "localhost"
        assert config.port == 1883
        assert config.username is None
        assert config.password is None
        assert config.client_id == "gv2mqtt"
        assert config.discovery_prefix == "homeassistant"
        assert config.ha_discovery is True

    def test_missing_required_field(self):
        """Test validation with missing required field"""
        with pytest.raises(ValidationError):
            MqttConfig()  # host is required


class TestPollingConfig:
    """Test polling configuration"""

    def test_default_values(self):
        assert PollingConfig().interval_secs == 900.0

    def test_interval_validation(self):
        """Test interval validation (must be >= 1)"""
        PollingConfig(interval_secs=1)
        with pytest.raises(ValidationError):
            PollingConfig(interval_secs=0.5)


class TestHubConfig:
    """Test main hub configuration"""

    def test_defaults(self):
        config = HubConfig(mqtt=MqttConfig(host="localhost"))
        assert config.logging == LoggingConfig()
        assert config.poll_interval == timedelta(seconds=900)

    def test_poll_interval(self):
        config = HubConfig(mqtt={"host": "localhost"}, polling={"interval_secs": 60})
        assert config.poll_interval == timedelta(seconds=60)


class TestConfigurationManager:
    """Test loading config.yaml with environment overrides"""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("GOVEE_MQTT_HOST", "GOVEE_MQTT_PORT", "GOVEE_MQTT_USER",
                     "GOVEE_MQTT_PASSWORD", "GOVEE_POLL_INTERVAL", "GOVEEHUB_CONFIG"):
            monkeypatch.delenv(name, raising=False)

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "mqtt:\n"
            "  host: broker.local\n"
            "  port: 1884\n"
            "polling:\n"
            "  interval_secs: 120\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = ConfigurationManager(str(path)).load_config()

        assert config.mqtt.host == "broker.local"
        assert config.mqtt.port == 1884
        assert config.polling.interval_secs == 120
        assert config.logging.level == "DEBUG"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("mqtt:\n  host: broker.local\n")
        monkeypatch.setenv("GOVEE_MQTT_HOST", "other.local")
        monkeypatch.setenv("GOVEE_MQTT_PORT", "8883")
        monkeypatch.setenv("GOVEE_POLL_INTERVAL", "30")

        config = ConfigurationManager(str(path)).load_config()

        assert config.mqtt.host == "other.local"
        assert config.mqtt.port == 8883
        assert config.polling.interval_secs == 30.0

    def test_env_only(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOVEE_MQTT_HOST", "broker.local")
        monkeypatch.setenv("GOVEE_MQTT_USER", "user")
        monkeypatch.setenv("GOVEE_MQTT_PASSWORD", "secret")

        config = ConfigurationManager(str(tmp_path / "missing.yaml")).load_config()

        assert config.mqtt.host == "broker.local"
        assert config.mqtt.username == "user"
        assert config.mqtt.password == "secret"

    def test_nothing_configured(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "missing.yaml")).load_config()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("mqtt:\n  host: broker.local\npolling:\n  interval_secs: 0\n")
        with pytest.raises(ValidationError):
            ConfigurationManager(str(path)).load_config()

    def test_config_path_precedence(self, tmp_path, monkeypatch):
        cli = tmp_path / "cli.yaml"
        env = tmp_path / "env.yaml"
        monkeypatch.setenv("GOVEEHUB_CONFIG", str(env))

        assert _resolve_config_path(str(cli)) == cli.resolve()
        assert _resolve_config_path(None) == env.resolve()
        monkeypatch.delenv("GOVEEHUB_CONFIG")
        assert _resolve_config_path(None).name == "config.yaml"
