"""
Display metadata for capability instances, and the per-device unit system
those instances are reported in.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from goveehub.quirks import HumidityUnits, Quirk
from goveehub.temperature import TemperatureUnits

TEMPERATURE_INSTANCE = "sensorTemperature"
HUMIDITY_INSTANCE = "sensorHumidity"


@dataclass(frozen=True)
class InstanceDescription:
    name: str
    unit_of_measurement: Optional[str] = None
    converts_units: bool = False


KNOWN_INSTANCES: Dict[str, InstanceDescription] = {
    TEMPERATURE_INSTANCE: InstanceDescription(
        "Temperature", TemperatureUnits.CELSIUS.unit_of_measurement, True
    ),
    HUMIDITY_INSTANCE: InstanceDescription("Humidity", "%", True),
    "online": InstanceDescription("Connected to Govee Cloud"),
}


def describe_instance(instance: str) -> InstanceDescription:
    """Unknown instances are shown under their raw name, without a unit."""
    return KNOWN_INSTANCES.get(instance) or InstanceDescription(instance)


def temperature_units_for(quirk: Optional[Quirk]) -> TemperatureUnits:
    if quirk and quirk.platform_temperature_sensor_units:
        return quirk.platform_temperature_sensor_units
    return TemperatureUnits.CELSIUS


def humidity_units_for(quirk: Optional[Quirk]) -> HumidityUnits:
    if quirk and quirk.platform_humidity_sensor_units:
        return quirk.platform_humidity_sensor_units
    return HumidityUnits.RELATIVE_PERCENT
