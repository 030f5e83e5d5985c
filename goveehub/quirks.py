"""
Per-SKU quirks.

Some hardware reports platform sensor values in a unit other than the one
the platform API documents. A quirk records the unit a given SKU actually
uses so readings can be normalized before they are displayed.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from goveehub.temperature import TemperatureUnits

log = logging.getLogger(__name__)


class HumidityUnits(str, Enum):
    RELATIVE_PERCENT = "relative_percent"
    # Reading of 4520 means 45.20 %RH
    RELATIVE_PERCENT_TIMES_100 = "relative_percent_times_100"

    def from_reading_to_relative_percent(self, value: float) -> float:
        if self is HumidityUnits.RELATIVE_PERCENT_TIMES_100:
            return value / 100.0
        return value


@dataclass(frozen=True)
class Quirk:
    sku: str
    platform_temperature_sensor_units: Optional[TemperatureUnits] = None
    platform_humidity_sensor_units: Optional[HumidityUnits] = None

    @classmethod
    def thermometer(cls, sku: str) -> "Quirk":
        """Hygrometers/thermometers that report Fahrenheit through the platform API."""
        return cls(
            sku=sku,
            platform_temperature_sensor_units=TemperatureUnits.FAHRENHEIT,
            platform_humidity_sensor_units=HumidityUnits.RELATIVE_PERCENT,
        )


def _build_quirks() -> Dict[str, Quirk]:
    quirks = [
        Quirk.thermometer("H5051"),
        Quirk.thermometer("H5052"),
        Quirk.thermometer("H5071"),
        Quirk.thermometer("H5074"),
        Quirk.thermometer("H5075"),
        Quirk.thermometer("H5100"),
        Quirk.thermometer("H5101"),
        Quirk.thermometer("H5102"),
        Quirk.thermometer("H5103"),
        Quirk.thermometer("H5104"),
        Quirk.thermometer("H5105"),
        Quirk.thermometer("H5174"),
        Quirk.thermometer("H5177"),
        Quirk.thermometer("H5179"),
        Quirk(
            sku="H7102",
            platform_temperature_sensor_units=TemperatureUnits.FAHRENHEIT,
        ),
        Quirk(
            sku="H7141",
            platform_humidity_sensor_units=HumidityUnits.RELATIVE_PERCENT_TIMES_100,
        ),
        Quirk(
            sku="H7142",
            platform_humidity_sensor_units=HumidityUnits.RELATIVE_PERCENT_TIMES_100,
        ),
    ]
    return {q.sku: q for q in quirks}


QUIRKS: Dict[str, Quirk] = _build_quirks()


def resolve_quirk(sku: str) -> Optional[Quirk]:
    quirk = QUIRKS.get(sku)
    if quirk:
        log.debug(f"Using quirk for {sku}: {quirk}")
    return quirk
