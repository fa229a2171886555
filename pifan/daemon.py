"""Main daemon entry point: temperature sampling and fan on/off control loop."""

import logging
import signal
import sys
import time

from pifan.actuator import Actuator, make_actuator
from pifan.config import Config
from pifan.errors import (
    ActuatorError,
    ActuatorReleaseError,
    ConfigLoadError,
    SensorReadError,
)
from pifan.hysteresis import HysteresisEngine
from pifan.temperature import TemperatureSource, make_sensor
from pifan.window import SampleWindow

log = logging.getLogger(__name__)

EXIT_SHUTDOWN = 1  # the loop never ends normally
WAIT_SLICE = 0.5  # seconds between stop-flag checks while waiting


class Daemon:
    """Ties together temperature sampling, hysteresis and the fan actuator."""

    def __init__(
        self,
        config: Config,
        sensor: TemperatureSource | None = None,
        actuator: Actuator | None = None,
    ) -> None:
        self._config = config
        self._sensor = sensor if sensor is not None else make_sensor(
            config.sensor, config.sensor_path,
        )
        self._actuator = actuator if actuator is not None else make_actuator(
            config.backend, config.pin, config.gpio_cmd, config.gpio_numbering,
        )
        self._window = SampleWindow(config.sample_max)
        self._engine = HysteresisEngine(config.tem_max, config.tem_min)
        self._running = True

    def stop(self) -> None:
        """Ask the loop to exit at the next check."""
        self._running = False

    def _on_shutdown(self, signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("Received %s, shutting down", sig_name)
        self.stop()

    def _wait(self, seconds: float) -> None:
        """Sleep in small increments so we can respond to signals promptly."""
        end = time.monotonic() + seconds
        while self._running and time.monotonic() < end:
            time.sleep(max(0.0, min(WAIT_SLICE, end - time.monotonic())))

    def cycle(self) -> bool:
        """Run one read, smooth, decide, act step. Returns the fan state applied."""
        temp = self._sensor.read()
        self._window.push(temp)
        avg = self._window.average()

        log.info("Temperature samples: %s", ", ".join(f"{s:.1f}" for s in self._window.samples))
        log.info("Current temperature (avg): %.2f°C", avg)

        fan_on = self._engine.update(avg)

        target = self._engine.target
        log.info("Target threshold: %s", "none" if target is None else f"{target:.1f}°C")

        log.info("Open fan" if fan_on else "Close fan")
        self._actuator.set_state(fan_on)
        return fan_on

    def _release(self) -> None:
        """Put the fan line back to input. Failures are logged, never raised."""
        try:
            self._actuator.release()
            log.info("Fan GPIO released")
        except ActuatorReleaseError as e:
            log.error("Failed to release fan GPIO: %s", e)

    def run(self) -> int:
        """Main loop: read, smooth, decide, switch the fan, wait.

        Only returns once a signal or a fatal error stops the loop, after the
        actuator has been released. The return value is the process exit code.
        """
        log.info(
            "Starting daemon with backend=%s, pin=%d, sensor=%s, "
            "tem_max=%.1f, tem_min=%.1f, sample_max=%d, sample_period=%dms",
            self._config.backend,
            self._config.pin,
            self._config.sensor,
            self._config.tem_max,
            self._config.tem_min,
            self._config.sample_max,
            self._config.sample_period,
        )

        signal.signal(signal.SIGTERM, self._on_shutdown)
        signal.signal(signal.SIGINT, self._on_shutdown)

        try:
            self._actuator.init()
            while self._running:
                self.cycle()
                self._wait(self._config.sample_period_seconds)
        except (SensorReadError, ActuatorError) as e:
            log.error("Control loop aborted: %s", e)
        finally:
            self._release()

        log.info("Daemon stopped")
        return EXIT_SHUTDOWN


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    try:
        config = Config.load(argv)
    except ConfigLoadError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    config.setup_logging()
    sys.exit(Daemon(config).run())


if __name__ == "__main__":
    main()
