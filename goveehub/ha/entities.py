"""
Builds the entity list for a discovery pass.

Entities are rebuilt from the store on every pass; because unique_ids are
derived from device and instance identity, rebuilding is idempotent from Home
Assistant's point of view.
"""
import logging
from datetime import timedelta
from typing import List

from goveehub import __version__
from goveehub.device import ServiceDevice
from goveehub.ha.instance import EntityInstance, EntityList
from goveehub.ha.sensor import CapabilitySensor, DeviceStatusDiagnostic, GlobalFixedDiagnostic
from goveehub.state import DeviceStore

log = logging.getLogger("goveehub.ha.entities")

SENSOR_CAPABILITY_TYPES = (
    "devices.capabilities.property",
    "devices.capabilities.online",
)


def global_entities() -> List[EntityInstance]:
    return [GlobalFixedDiagnostic("Version", __version__)]


def entities_for_device(
    device: ServiceDevice, store: DeviceStore, poll_interval: timedelta
) -> List[EntityInstance]:
    entities: List[EntityInstance] = [DeviceStatusDiagnostic(device, store, poll_interval)]

    if device.http_device_info is None:
        return entities

    for cap in device.http_device_info.capabilities:
        if cap.type not in SENSOR_CAPABILITY_TYPES:
            continue
        sensor = CapabilitySensor(device, store, cap)
        entities.append(sensor)
        imperial = sensor.into_imperial()
        if imperial is not None:
            entities.append(imperial)

    return entities


async def build_entity_list(store: DeviceStore, poll_interval: timedelta) -> EntityList:
    entities = EntityList(global_entities())
    for device in await store.devices():
        device_entities = entities_for_device(device, store, poll_interval)
        log.debug(f"{device}: {len(device_entities)} entities")
        entities.extend(device_entities)
    log.info(f"Built {len(entities)} entities")
    return entities
