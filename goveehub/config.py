from typing import Optional
from datetime import timedelta
from pydantic import BaseModel, Field

class MqttConfig(BaseModel):
    host: str
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: str = "gv2mqtt"
    discovery_prefix: str = "homeassistant"
    ha_discovery: bool = True

class PollingConfig(BaseModel):
    # How often the platform API is polled; also drives the staleness threshold
    interval_secs: float = Field(ge=1, default=900.0)

class LoggingConfig(BaseModel):
    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ha_debug: bool = False  # Enable debug logging for Home Assistant messages


class HubConfig(BaseModel):
    mqtt: MqttConfig
    polling: PollingConfig = PollingConfig()
    logging: LoggingConfig = LoggingConfig()

    @property
    def poll_interval(self) -> timedelta:
        return timedelta(seconds=self.polling.interval_secs)
