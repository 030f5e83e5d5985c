import logging
from typing import Any
from pydantic import BaseModel

from goveehub.mqtt import Mqtt

log = logging.getLogger("goveehub.ha.client")

DISCOVERY_PREFIX = "homeassistant"


class HassClient:
    """
    Thin async facade over the MQTT connection used by entities.

    Publish failures propagate as MqttPublishError; nothing is retried here,
    the next scheduled refresh is the retry.
    """

    def __init__(self, mqtt_client: Mqtt, discovery_prefix: str = DISCOVERY_PREFIX) -> None:
        self.mqtt = mqtt_client
        self.discovery_prefix = discovery_prefix.rstrip("/")

    def discovery_topic(self, integration: str, unique_id: str) -> str:
        return f"{self.discovery_prefix}/{integration}/{unique_id}/config"

    async def publish(self, topic: str, value: str, retain: bool = False) -> None:
        self.mqtt.pub(topic, value, retain=retain)

    async def publish_obj(self, topic: str, obj: Any, retain: bool = False) -> None:
        if isinstance(obj, BaseModel):
            obj = obj.model_dump(mode="json", exclude_none=True)
        self.mqtt.pub(topic, obj, retain=retain)
