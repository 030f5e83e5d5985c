import logging
from typing import Optional, Dict, Any, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class DeviceCapability(BaseModel):
    """A capability as advertised in the platform API device list."""
    type: str = ""
    instance: str
    parameters: Optional[Any] = None


class HttpDeviceInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sku: str
    device: str
    device_name: str = Field(default="", alias="deviceName")
    type: str = ""
    capabilities: List[DeviceCapability] = []


class DeviceCapabilityState(BaseModel):
    """A capability as reported by the platform API device state query."""
    type: str = ""
    instance: str
    state: Any = None


class HttpDeviceState(BaseModel):
    sku: str
    device: str
    capabilities: List[DeviceCapabilityState] = []


class DeviceColor(BaseModel):
    r: int = 0
    g: int = 0
    b: int = 0

    @classmethod
    def from_rgb_int(cls, value: int) -> "DeviceColor":
        return cls(r=(value >> 16) & 0xFF, g=(value >> 8) & 0xFF, b=value & 0xFF)


class DeviceState(BaseModel):
    """State of a device as observed through one transport."""
    on: bool = False
    light_on: Optional[bool] = None
    brightness: int = 0
    color: DeviceColor = DeviceColor()
    kelvin: int = 0
    online: Optional[bool] = None
    source: str
    updated: datetime

    @classmethod
    def from_status(cls, status: Dict[str, Any], source: str, updated: datetime) -> "DeviceState":
        """Build from a LAN/IoT status document (onOff, brightness, color, colorTemInKelvin).

        Malformed fields are logged and left at their defaults.
        """
        state = cls(source=source, updated=updated)

        def field(name, parse):
            value = status.get(name)
            if value is None:
                return None
            try:
                return parse(value)
            except (TypeError, ValueError, AttributeError):
                log.debug(f"{source}: ignoring malformed {name} value {value!r}")
                return None

        on = field("onOff", lambda v: bool(int(v)))
        if on is not None:
            state.on = on
            state.light_on = on
        brightness = field("brightness", int)
        if brightness is not None:
            state.brightness = brightness
        color = field("color", lambda v: DeviceColor(**{k: int(v.get(k) or 0) for k in ("r", "g", "b")}))
        if color is not None:
            state.color = color
        kelvin = field("colorTemInKelvin", int)
        if kelvin is not None:
            state.kelvin = kelvin
        state.online = field("online", lambda v: v.lower() == "true" if isinstance(v, str) else bool(v))
        return state
