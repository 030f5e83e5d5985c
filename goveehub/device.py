"""
Service-side record of a single Govee device.

A device is observed through up to three transports (the platform HTTP API,
the LAN protocol and the AWS IoT push channel). Each transport keeps its own
raw documents here; the per-transport ``DeviceState`` views are computed on
demand and the most recently updated one is the device's overall state.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from goveehub.models import DeviceColor, DeviceState, HttpDeviceInfo, HttpDeviceState
from goveehub.quirks import Quirk, resolve_quirk
from goveehub.timezone_utils import now_utc, to_utc

log = logging.getLogger(__name__)


class ServiceDevice:
    def __init__(self, sku: str, device_id: str):
        self.sku = sku
        self.id = device_id

        # Platform API
        self.http_device_info: Optional[HttpDeviceInfo] = None
        self.http_device_state: Optional[HttpDeviceState] = None
        self.last_polled: Optional[datetime] = None

        # LAN API
        self.lan_device_status: Optional[Dict[str, Any]] = None
        self.last_lan_device_status_update: Optional[datetime] = None

        # AWS IoT
        self.iot_device_status: Optional[Dict[str, Any]] = None
        self.last_iot_device_status_update: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sku={self.sku}, id={self.id})"

    def __str__(self) -> str:
        return f"{self.name()} ({self.sku} {self.id})"

    def name(self) -> str:
        if self.http_device_info and self.http_device_info.device_name:
            return self.http_device_info.device_name
        return self.sku

    def resolve_quirk(self) -> Optional[Quirk]:
        return resolve_quirk(self.sku)

    def set_http_device_info(self, info: HttpDeviceInfo):
        self.http_device_info = info

    def set_http_device_state(self, state: HttpDeviceState, polled: Optional[datetime] = None):
        self.http_device_state = state
        self.last_polled = to_utc(polled) if polled else now_utc()

    def set_lan_device_status(self, status: Dict[str, Any], updated: datetime):
        self.lan_device_status = status
        self.last_lan_device_status_update = to_utc(updated)

    def set_iot_device_status(self, status: Dict[str, Any], updated: datetime):
        self.iot_device_status = status
        self.last_iot_device_status_update = to_utc(updated)

    def compute_lan_device_state(self) -> Optional[DeviceState]:
        if self.lan_device_status is None or self.last_lan_device_status_update is None:
            return None
        return DeviceState.from_status(
            self.lan_device_status, "LAN API", self.last_lan_device_status_update
        )

    def compute_iot_device_state(self) -> Optional[DeviceState]:
        if self.iot_device_status is None or self.last_iot_device_status_update is None:
            return None
        return DeviceState.from_status(
            self.iot_device_status, "AWS IoT API", self.last_iot_device_status_update
        )

    def compute_http_device_state(self) -> Optional[DeviceState]:
        if self.http_device_state is None or self.last_polled is None:
            return None

        state = DeviceState(source="PLATFORM API", updated=self.last_polled)
        for cap in self.http_device_state.capabilities:
            value = cap.state.get("value") if isinstance(cap.state, dict) else None
            if value is None:
                continue
            try:
                if cap.instance == "powerSwitch":
                    state.on = bool(int(value))
                    state.light_on = state.on
                elif cap.instance == "online":
                    state.online = bool(value)
                elif cap.instance == "brightness":
                    state.brightness = int(value)
                elif cap.instance == "colorRgb":
                    state.color = DeviceColor.from_rgb_int(int(value))
                elif cap.instance == "colorTemperatureK":
                    state.kelvin = int(value)
            except (TypeError, ValueError):
                log.debug(f"{self}: ignoring malformed {cap.instance} value {value!r}")
        return state

    def device_state(self) -> Optional[DeviceState]:
        """The most recently updated of the per-transport states."""
        candidates = [
            s
            for s in (
                self.compute_iot_device_state(),
                self.compute_lan_device_state(),
                self.compute_http_device_state(),
            )
            if s is not None
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda s: s.updated)
