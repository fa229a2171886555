"""Binary fan actuators driving a single GPIO line.

Two interchangeable backends implement the same init / set_state / release
lifecycle:

- CommandActuator shells out to a wiringPi-style ``gpio`` utility.
- NativeActuator talks to the line through the RPi.GPIO driver.

Backend failures are translated into ActuatorInitError, ActuatorWriteError
and ActuatorReleaseError, so callers never see backend-specific exceptions.
"""

import logging
import subprocess
from typing import Any, Protocol

from pifan.errors import ActuatorInitError, ActuatorReleaseError, ActuatorWriteError

log = logging.getLogger(__name__)

DEFAULT_GPIO_CMD = "/usr/bin/gpio"
DEFAULT_PIN = 1
VALID_BACKENDS = ("command", "native")
VALID_NUMBERINGS = ("bcm", "board")

COMMAND_TIMEOUT = 5.0  # seconds a gpio subprocess may run


class Actuator(Protocol):
    def init(self) -> None: ...

    def set_state(self, on: bool) -> None: ...

    def release(self) -> None: ...


class CommandActuator:
    """Drives the fan through an external ``gpio`` command-line tool."""

    def __init__(
        self, pin: int = DEFAULT_PIN, gpio_cmd: str = DEFAULT_GPIO_CMD,
        timeout: float = COMMAND_TIMEOUT,
    ) -> None:
        self.pin = pin
        self.gpio_cmd = gpio_cmd
        self.timeout = timeout

    def _run(self, *args: str) -> None:
        """Run the gpio tool. Raises OSError or a subprocess error on failure."""
        cmd = [self.gpio_cmd, *args]
        log.debug("Running %s", " ".join(cmd))
        subprocess.run(cmd, check=True, capture_output=True, timeout=self.timeout)

    def init(self) -> None:
        try:
            self._run("mode", str(self.pin), "output")
        except (OSError, subprocess.SubprocessError) as e:
            raise ActuatorInitError(f"Cannot set pin {self.pin} to output: {e}") from e

    def set_state(self, on: bool) -> None:
        try:
            self._run("write", str(self.pin), "1" if on else "0")
        except (OSError, subprocess.SubprocessError) as e:
            raise ActuatorWriteError(f"Cannot write pin {self.pin}: {e}") from e

    def release(self) -> None:
        try:
            self._run("mode", str(self.pin), "input")
        except (OSError, subprocess.SubprocessError) as e:
            raise ActuatorReleaseError(f"Cannot set pin {self.pin} to input: {e}") from e


class NativeActuator:
    """Drives the fan through the RPi.GPIO driver.

    The driver module is imported by init() rather than at module load, since
    RPi.GPIO refuses to import on anything but a Raspberry Pi.
    """

    def __init__(self, pin: int = DEFAULT_PIN, numbering: str = "bcm") -> None:
        if numbering not in VALID_NUMBERINGS:
            raise ValueError(
                f"Invalid numbering '{numbering}'. Must be one of: {', '.join(VALID_NUMBERINGS)}"
            )
        self.pin = pin
        self.numbering = numbering
        self._gpio: Any = None

    def init(self) -> None:
        try:
            import RPi.GPIO as gpio

            gpio.setwarnings(False)
            gpio.setmode(gpio.BCM if self.numbering == "bcm" else gpio.BOARD)
            gpio.setup(self.pin, gpio.OUT)
        except (ImportError, RuntimeError, ValueError) as e:
            raise ActuatorInitError(f"Cannot set pin {self.pin} to output: {e}") from e
        self._gpio = gpio
        log.debug("RPi.GPIO pin %d (%s) configured as output", self.pin, self.numbering)

    def set_state(self, on: bool) -> None:
        if self._gpio is None:
            raise ActuatorWriteError("Actuator not initialized")
        try:
            self._gpio.output(self.pin, self._gpio.HIGH if on else self._gpio.LOW)
        except (RuntimeError, ValueError) as e:
            raise ActuatorWriteError(f"Cannot write pin {self.pin}: {e}") from e

    def release(self) -> None:
        if self._gpio is None:
            return
        try:
            self._gpio.setup(self.pin, self._gpio.IN)
        except (RuntimeError, ValueError) as e:
            raise ActuatorReleaseError(f"Cannot set pin {self.pin} to input: {e}") from e


def make_actuator(
    backend: str, pin: int = DEFAULT_PIN, gpio_cmd: str = DEFAULT_GPIO_CMD,
    numbering: str = "bcm",
) -> Actuator:
    """Build the actuator for the named backend."""
    if backend == "command":
        return CommandActuator(pin, gpio_cmd)
    if backend == "native":
        return NativeActuator(pin, numbering)
    raise ValueError(
        f"Unknown backend '{backend}'. Must be one of: {', '.join(VALID_BACKENDS)}"
    )
