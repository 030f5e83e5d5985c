# sensor.py
import copy
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from goveehub.device import ServiceDevice
from goveehub.ha.base import Device, EntityConfig
from goveehub.ha.client import HassClient
from goveehub.ha.instance import EntityInstance, publish_entity_config
from goveehub.ha.topics import (
    availability_topic,
    sensor_attributes_topic,
    sensor_state_topic,
    topic_safe_id,
    topic_safe_string,
)
from goveehub.ha.units import (
    HUMIDITY_INSTANCE,
    TEMPERATURE_INSTANCE,
    describe_instance,
    humidity_units_for,
    temperature_units_for,
)
from goveehub.models import DeviceCapability, DeviceCapabilityState, DeviceState
from goveehub.quirks import Quirk
from goveehub.state import DeviceStore
from goveehub.temperature import TemperatureUnits, ctof
from goveehub.timezone_utils import now_utc

log = logging.getLogger("goveehub.ha.sensor")

# One missed poll is tolerated before a device is reported missing
STATUS_GRACE_PERIOD = timedelta(seconds=30)


class SensorConfig(EntityConfig):
    state_topic: str
    unit_of_measurement: Optional[str] = None
    json_attributes_topic: Optional[str] = None

    async def publish(self, client: HassClient) -> None:
        await publish_entity_config("sensor", client, self)

    async def notify_state(self, client: HassClient, value: str) -> None:
        await client.publish(self.state_topic, value)


def json_pointer(doc: Any, pointer: str) -> Any:
    """Resolve an RFC 6901 pointer such as ``/value/currentHumidity``; None if absent."""
    if pointer == "":
        return doc
    current = doc
    for token in pointer.lstrip("/").split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if token not in current:
                return None
            current = current[token]
        elif isinstance(current, list):
            try:
                current = current[int(token)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _format_reading(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


class GlobalFixedDiagnostic(EntityInstance):
    """A service-level value that never changes, e.g. the running version."""

    def __init__(self, name: str, value: str):
        unique_id = f"global-{topic_safe_string(name)}"
        self.sensor = SensorConfig(
            availability_topic=availability_topic(),
            name=name,
            entity_category="diagnostic",
            device=Device.this_service(),
            unique_id=unique_id,
            state_topic=sensor_state_topic(unique_id),
        )
        self.value = value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.sensor.unique_id})"

    async def publish_config(self, client: HassClient) -> None:
        await self.sensor.publish(client)

    async def notify_state(self, client: HassClient) -> None:
        await self.sensor.notify_state(client, self.value)


class CapabilitySensor(EntityInstance):
    """
    Reports one platform capability of one device.

    Holds only the device id and the store; the device is looked up afresh on
    every refresh.
    """

    def __init__(self, device: ServiceDevice, store: DeviceStore, instance: DeviceCapability):
        unique_id = f"sensor-{topic_safe_id(device)}-{topic_safe_string(instance.instance)}"
        description = describe_instance(instance.instance)

        self.sensor = SensorConfig(
            availability_topic=availability_topic(),
            name=description.name,
            entity_category="diagnostic",
            device=Device.for_device(device),
            unique_id=unique_id,
            state_topic=sensor_state_topic(unique_id),
            unit_of_measurement=description.unit_of_measurement,
        )
        self.device_id = device.id
        self.store = store
        self.instance_name = instance.instance

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.sensor.unique_id})"

    def into_imperial(self) -> Optional["CapabilitySensor"]:
        """Fahrenheit twin of a temperature sensor; None for every other instance."""
        if self.instance_name != TEMPERATURE_INSTANCE:
            return None

        imperial = copy.copy(self)
        imperial.sensor = self.sensor.model_copy(
            update={
                "unit_of_measurement": TemperatureUnits.FAHRENHEIT.unit_of_measurement,
                "unique_id": f"{self.sensor.unique_id}_F",
                "state_topic": f"{self.sensor.state_topic}_F",
                "name": f"{self.sensor.name} (imperial)",
            }
        )
        return imperial

    async def publish_config(self, client: HassClient) -> None:
        await self.sensor.publish(client)

    def compute_value(self, cap: DeviceCapabilityState, quirk: Optional[Quirk]) -> str:
        if not describe_instance(self.instance_name).converts_units:
            return json.dumps(cap.state, separators=(",", ":"), ensure_ascii=False)

        if self.instance_name == TEMPERATURE_INSTANCE:
            reading = _as_float(json_pointer(cap.state, "/value"))
            if reading is None:
                return ""
            celsius = temperature_units_for(quirk).from_reading_to_celsius(reading)
            if self.sensor.unit_of_measurement == TemperatureUnits.FAHRENHEIT.unit_of_measurement:
                return _format_reading(ctof(celsius))
            return _format_reading(celsius)

        if self.instance_name == HUMIDITY_INSTANCE:
            reading = _as_float(json_pointer(cap.state, "/value/currentHumidity"))
            if reading is None:
                return ""
            return _format_reading(humidity_units_for(quirk).from_reading_to_relative_percent(reading))

        return json.dumps(cap.state, separators=(",", ":"), ensure_ascii=False)

    async def notify_state(self, client: HassClient) -> None:
        device = await self.store.device_by_id(self.device_id)
        if device is None:
            # Devices can disappear between discovery and refresh
            log.warning(f"{self!r}: device {self.device_id} is no longer known, skipping refresh")
            return

        quirk = device.resolve_quirk()

        if device.http_device_state is not None:
            for cap in device.http_device_state.capabilities:
                if cap.instance == self.instance_name:
                    value = self.compute_value(cap, quirk)
                    await self.sensor.notify_state(client, value)
                    return

        log.debug(f"CapabilitySensor.notify_state: didn't find state for {device} {self.instance_name}")


def status_summary(device_state: Optional[DeviceState], now: datetime, threshold: timedelta) -> str:
    if device_state is None:
        return "Unknown"
    if now - device_state.updated > threshold:
        return "Missing"
    return "Available"


def _dump(model) -> Any:
    return model.model_dump(mode="json", by_alias=True) if model is not None else None


class DeviceStatusDiagnostic(EntityInstance):
    def __init__(
        self,
        device: ServiceDevice,
        store: DeviceStore,
        poll_interval: timedelta,
        clock: Callable[[], datetime] = now_utc,
    ):
        unique_id = f"sensor-{topic_safe_id(device)}-gv2mqtt-status"

        self.sensor = SensorConfig(
            availability_topic=availability_topic(),
            name="Status",
            entity_category="diagnostic",
            device=Device.for_device(device),
            unique_id=unique_id,
            state_topic=sensor_state_topic(unique_id),
            json_attributes_topic=sensor_attributes_topic(unique_id),
        )
        self.device_id = device.id
        self.store = store
        self.threshold = poll_interval + STATUS_GRACE_PERIOD
        self.clock = clock

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.sensor.unique_id})"

    async def publish_config(self, client: HassClient) -> None:
        await self.sensor.publish(client)

    async def notify_state(self, client: HassClient) -> None:
        device = await self.store.device_by_id(self.device_id)
        if device is None:
            log.warning(f"{self!r}: device {self.device_id} is no longer known, skipping refresh")
            return

        device_state = device.device_state()
        summary = status_summary(device_state, self.clock(), self.threshold)

        attributes = {
            "iot": _dump(device.compute_iot_device_state()),
            "lan": _dump(device.compute_lan_device_state()),
            "http": _dump(device.compute_http_device_state()),
            "platform_metadata": _dump(device.http_device_info),
            "platform_state": _dump(device.http_device_state),
            "overall": _dump(device_state),
        }

        await self.sensor.notify_state(client, summary)
        if self.sensor.json_attributes_topic:
            await client.publish_obj(self.sensor.json_attributes_topic, attributes)
