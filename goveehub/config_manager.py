"""
Configuration Manager for goveehub

Loads configuration from config.yaml and applies environment overrides.
"""

import os
import yaml
import logging
from typing import Any, Dict
from pathlib import Path
from goveehub.config import HubConfig

log = logging.getLogger(__name__)

# env var -> (section, key, converter)
ENV_OVERRIDES = {
    "GOVEE_MQTT_HOST": ("mqtt", "host", str),
    "GOVEE_MQTT_PORT": ("mqtt", "port", int),
    "GOVEE_MQTT_USER": ("mqtt", "username", str),
    "GOVEE_MQTT_PASSWORD": ("mqtt", "password", str),
    "GOVEE_POLL_INTERVAL": ("polling", "interval_secs", float),
}


class ConfigurationManager:
    """Manages configuration loading from file with environment overrides."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)

    def load_config(self) -> HubConfig:
        config_dict = self._load_from_file()
        self._apply_env_overrides(config_dict)
        if not self.config_path.exists() and "host" not in (config_dict.get("mqtt") or {}):
            raise FileNotFoundError(
                f"No MQTT host configured: {self.config_path} is missing and GOVEE_MQTT_HOST is not set"
            )
        config = HubConfig(**config_dict)
        log.info(
            f"Configuration loaded - MQTT {config.mqtt.host}:{config.mqtt.port}, "
            f"poll interval {config.polling.interval_secs}s"
        )
        return config

    def _load_from_file(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            log.info(f"Config file {self.config_path} not found, relying on environment")
            return {}
        log.info(f"Loading configuration from {self.config_path}")
        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.config_path}: top level must be a mapping")
        return data

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> None:
        for env_name, (section, key, convert) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None or value == "":
                continue
            section_dict = config_dict.setdefault(section, {})
            if not isinstance(section_dict, dict):
                raise ValueError(f"Config section '{section}' must be a mapping")
            section_dict[key] = convert(value)
            log.debug(f"Applied {env_name} override to {section}.{key}")
