"""CPU temperature sources: sysfs thermal zone or psutil."""

import logging
from typing import Protocol

import psutil

from pifan.errors import SensorReadError

log = logging.getLogger(__name__)

DEFAULT_SENSOR_PATH = "/sys/class/thermal/thermal_zone0/temp"
VALID_SENSORS = ("sysfs", "psutil")

# Preferred sensor labels in priority order
_PREFERRED_LABELS = ("Package id 0", "Tctl", "Tdie", "CPU")

# Known CPU thermal driver names
_CPU_DRIVERS = ("cpu_thermal", "coretemp", "k10temp", "zenpower")


class TemperatureSource(Protocol):
    def read(self) -> float: ...


class SysfsTemperatureSource:
    """Reads a thermal zone file holding millidegrees as a text integer."""

    def __init__(self, path: str = DEFAULT_SENSOR_PATH) -> None:
        self.path = path

    def read(self) -> float:
        """Read the current temperature in degrees Celsius.

        Raises SensorReadError if the file cannot be read or is not an integer.
        """
        try:
            with open(self.path) as f:
                raw = f.read()
        except UnicodeDecodeError as e:
            raise SensorReadError(f"Non-numeric content in {self.path}: {e}") from e
        except OSError as e:
            raise SensorReadError(f"Cannot read {self.path}: {e}") from e

        try:
            millidegrees = int(raw.strip())
        except ValueError as e:
            raise SensorReadError(f"Non-numeric content in {self.path}: {raw!r}") from e

        return millidegrees / 1000


class PsutilTemperatureSource:
    """Reads the CPU temperature through psutil's hardware sensor table.

    Returns the package/die temperature if available, otherwise the max
    reading of a known CPU driver, otherwise the max across all sensors.
    """

    def read(self) -> float:
        try:
            temps = psutil.sensors_temperatures()
        except (AttributeError, OSError) as e:
            raise SensorReadError(f"psutil.sensors_temperatures() failed: {e}") from e

        if not temps:
            raise SensorReadError("No temperature sensors reported by psutil")

        for label in _PREFERRED_LABELS:
            for entries in temps.values():
                for entry in entries:
                    if entry.label == label and entry.current > 0:
                        return entry.current

        for name in _CPU_DRIVERS:
            if name in temps:
                readings = [e.current for e in temps[name] if e.current > 0]
                if readings:
                    return max(readings)

        all_readings = [
            e.current for entries in temps.values() for e in entries if e.current > 0
        ]
        if not all_readings:
            raise SensorReadError("No positive temperature reading available")
        log.debug("No CPU sensor found, using max across %d sensors", len(all_readings))
        return max(all_readings)


def make_sensor(kind: str, path: str = DEFAULT_SENSOR_PATH) -> TemperatureSource:
    """Build the temperature source named by `kind`."""
    if kind == "sysfs":
        return SysfsTemperatureSource(path)
    if kind == "psutil":
        return PsutilTemperatureSource()
    raise ValueError(f"Unknown sensor '{kind}'. Must be one of: {', '.join(VALID_SENSORS)}")
