"""
Temperature unit helpers.

Govee's platform API reports sensor readings in whatever unit the hardware
happens to use. Everything is normalized to Celsius before display.
"""
from enum import Enum


def ctof(celsius: float) -> float:
    return (celsius * 9.0 / 5.0) + 32.0


def ftoc(fahrenheit: float) -> float:
    return (fahrenheit - 32.0) * 5.0 / 9.0


class TemperatureUnits(str, Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    def from_reading_to_celsius(self, value: float) -> float:
        if self is TemperatureUnits.FAHRENHEIT:
            return ftoc(value)
        return value

    @property
    def unit_of_measurement(self) -> str:
        return "°F" if self is TemperatureUnits.FAHRENHEIT else "°C"
