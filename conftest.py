"""
Shared fixtures: an in-memory device store, a HassClient whose MQTT
connection is a Mock, and a factory for devices with platform capabilities.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest
import pytz

from goveehub.device import ServiceDevice
from goveehub.ha.client import HassClient
from goveehub.models import DeviceCapability, DeviceCapabilityState, HttpDeviceInfo, HttpDeviceState
from goveehub.state import DeviceStore

DEVICE_ID = "AA:BB:CC:DD:EE:FF:00:11"
NO_QUIRK_SKU = "H9999"


@pytest.fixture
def store():
    return DeviceStore()


@pytest.fixture
def mqtt_client():
    return Mock()


@pytest.fixture
def hass(mqtt_client):
    return HassClient(mqtt_client)


def build_device(
    sku: str = NO_QUIRK_SKU,
    device_id: str = DEVICE_ID,
    states: Optional[Dict[str, Any]] = None,
    polled: Optional[datetime] = None,
) -> ServiceDevice:
    """A device advertising sensorTemperature/sensorHumidity/online, with `states` as its HTTP state."""
    device = ServiceDevice(sku, device_id)
    device.set_http_device_info(HttpDeviceInfo(
        sku=sku,
        device=device_id,
        deviceName="Living Room Thermometer",
        type="devices.types.thermometer",
        capabilities=[
            DeviceCapability(type="devices.capabilities.property", instance="sensorTemperature"),
            DeviceCapability(type="devices.capabilities.property", instance="sensorHumidity"),
            DeviceCapability(type="devices.capabilities.online", instance="online"),
            DeviceCapability(type="devices.capabilities.on_off", instance="powerSwitch"),
        ],
    ))
    if states is not None:
        device.set_http_device_state(
            HttpDeviceState(
                sku=sku,
                device=device_id,
                capabilities=[
                    DeviceCapabilityState(type="devices.capabilities.property", instance=instance, state=state)
                    for instance, state in states.items()
                ],
            ),
            polled or datetime(2024, 1, 1, 12, 0, 0, tzinfo=pytz.UTC),
        )
    return device


async def add_device(store: DeviceStore, device: ServiceDevice) -> None:
    async with store.device_mut(device.sku, device.id) as record:
        record.__dict__.update(device.__dict__)


def published(mqtt_client: Mock) -> Dict[str, Any]:
    """topic -> last payload passed to Mqtt.pub"""
    return {c.args[0]: c.args[1] for c in mqtt_client.pub.call_args_list}
