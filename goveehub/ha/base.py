from typing import List, Optional
from pydantic import BaseModel

from goveehub import __version__
from goveehub.ha.topics import TOPIC_PREFIX, topic_safe_id


class Origin(BaseModel):
    name: str = TOPIC_PREFIX
    sw_version: str = __version__


class Device(BaseModel):
    """The `device` block of a discovery payload."""
    name: str
    manufacturer: str
    model: str
    identifiers: List[str]
    sw_version: Optional[str] = None
    via_device: Optional[str] = None

    @classmethod
    def this_service(cls) -> "Device":
        return cls(
            name="Govee to MQTT",
            manufacturer=TOPIC_PREFIX,
            model=TOPIC_PREFIX,
            identifiers=[TOPIC_PREFIX],
            sw_version=__version__,
        )

    @classmethod
    def for_device(cls, device) -> "Device":
        return cls(
            name=device.name(),
            manufacturer="Govee",
            model=device.sku,
            identifiers=[f"{TOPIC_PREFIX}-{topic_safe_id(device)}"],
            via_device=TOPIC_PREFIX,
        )


class EntityConfig(BaseModel):
    availability_topic: str
    name: Optional[str] = None
    entity_category: Optional[str] = None
    origin: Origin = Origin()
    device: Device
    unique_id: str
    device_class: Optional[str] = None
    icon: Optional[str] = None

    def to_discovery(self) -> dict:
        """Discovery payload; unset optional fields are left out entirely."""
        return self.model_dump(mode="json", exclude_none=True)
