"""Configuration parsing from a dotenv-style file, environment and CLI arguments."""

import argparse
import logging
import os
from dataclasses import dataclass
from typing import Callable

from dotenv.parser import parse_stream

from pifan.actuator import DEFAULT_GPIO_CMD, DEFAULT_PIN, VALID_BACKENDS, VALID_NUMBERINGS
from pifan.errors import ConfigLoadError
from pifan.hysteresis import DEFAULT_TEM_MAX, DEFAULT_TEM_MIN
from pifan.temperature import DEFAULT_SENSOR_PATH, VALID_SENSORS

DEFAULT_CONFIG_PATH = "/etc/default/pifan"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pifan",
        description="CPU temperature driven on/off fan controller",
    )
    parser.add_argument(
        "config",
        nargs="?",
        help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--backend",
        choices=VALID_BACKENDS,
        help="GPIO backend (overrides config file)",
    )
    parser.add_argument(
        "--pin",
        type=int,
        help="GPIO pin driving the fan",
    )
    parser.add_argument(
        "--sample-period",
        type=int,
        help="Sampling period in milliseconds",
    )
    parser.add_argument(
        "--sensor",
        choices=VALID_SENSORS,
        help="Temperature source",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-level",
        choices=VALID_LOG_LEVELS,
        help="Log level (overrides config file)",
    )
    return parser.parse_args(argv)


def _parse_bool(raw: str) -> bool:
    return raw.lower() in ("true", "1", "yes")


def _convert(key: str, raw: str, conv: Callable[[str], object]) -> object:
    """Convert a raw config value, naming the key in the error."""
    try:
        return conv(raw.strip())
    except ValueError as e:
        raise ConfigLoadError(f"Invalid value for {key}: {raw!r}") from e


def _read_file(path: str, explicit: bool) -> dict[str, str]:
    """Read KEY=VALUE pairs. A missing file is only an error if it was asked for."""
    if not os.path.isfile(path):
        if explicit:
            raise ConfigLoadError(f"Cannot read configuration file: {path}")
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            bindings = list(parse_stream(f))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Cannot read configuration file {path}: {e}") from e

    values: dict[str, str] = {}
    for binding in bindings:
        if binding.error:
            raise ConfigLoadError(f"Cannot parse {path} line {binding.original.line}")
        if binding.key is not None and binding.value is not None:
            values[binding.key] = binding.value
    return values


# Config file / environment key -> (field name, converter)
_KEYS: dict[str, tuple[str, Callable[[str], object]]] = {
    "TEM_MAX": ("tem_max", float),
    "TEM_MIN": ("tem_min", float),
    "SAMPLE_MAX": ("sample_max", int),
    "SAMPLE_PERIOD": ("sample_period", int),
    "WIRE_PI_PIN": ("pin", int),
    "PIN": ("pin", int),
    "BACKEND": ("backend", str.lower),
    "GPIO_CMD": ("gpio_cmd", str),
    "GPIO_NUMBERING": ("gpio_numbering", str.lower),
    "SENSOR": ("sensor", str.lower),
    "SENSOR_PATH": ("sensor_path", str),
    "LOG_LEVEL": ("log_level", str.upper),
    "DEBUG": ("debug", _parse_bool),
}


@dataclass(frozen=True)
class Config:
    """Controller configuration, immutable once loaded."""

    tem_max: float = DEFAULT_TEM_MAX
    tem_min: float = DEFAULT_TEM_MIN
    sample_max: int = 3
    sample_period: int = 5000  # milliseconds
    pin: int = DEFAULT_PIN
    backend: str = "command"
    gpio_cmd: str = DEFAULT_GPIO_CMD
    gpio_numbering: str = "bcm"
    sensor: str = "sysfs"
    sensor_path: str = DEFAULT_SENSOR_PATH
    log_level: str = "INFO"
    debug: bool = False

    def __post_init__(self) -> None:
        if self.sample_max < 1:
            raise ConfigLoadError(f"SAMPLE_MAX must be positive, got {self.sample_max}")

        if self.sample_period <= 0:
            raise ConfigLoadError(f"SAMPLE_PERIOD must be positive, got {self.sample_period}")

        if self.pin < 0:
            raise ConfigLoadError(f"PIN must not be negative, got {self.pin}")

        if self.backend not in VALID_BACKENDS:
            raise ConfigLoadError(
                f"Invalid backend '{self.backend}'. Must be one of: {', '.join(VALID_BACKENDS)}"
            )

        if self.gpio_numbering not in VALID_NUMBERINGS:
            raise ConfigLoadError(
                f"Invalid GPIO numbering '{self.gpio_numbering}'. "
                f"Must be one of: {', '.join(VALID_NUMBERINGS)}"
            )

        if self.sensor not in VALID_SENSORS:
            raise ConfigLoadError(
                f"Invalid sensor '{self.sensor}'. Must be one of: {', '.join(VALID_SENSORS)}"
            )

        if self.debug:
            object.__setattr__(self, "log_level", "DEBUG")

        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigLoadError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

    @property
    def sample_period_seconds(self) -> float:
        return self.sample_period / 1000

    @classmethod
    def load(cls, argv: list[str] | None = None) -> "Config":
        """Load configuration from the config file, env vars, and CLI args.

        Priority (highest to lowest):
        1. CLI arguments
        2. Environment variables
        3. Config file (positional argument, or /etc/default/pifan)
        4. Dataclass defaults
        """
        args = _parse_cli_args(argv)
        path = args.config if args.config is not None else DEFAULT_CONFIG_PATH
        file_env = _read_file(path, explicit=args.config is not None)

        def env(key: str) -> str | None:
            if key in os.environ:
                return os.environ[key]
            return file_env.get(key)

        kwargs: dict[str, object] = {}

        for key, (field, conv) in _KEYS.items():
            if (v := env(key)) is not None:
                kwargs[field] = _convert(key, v, conv)

        # CLI arguments override everything
        if args.backend is not None:
            kwargs["backend"] = args.backend

        if args.pin is not None:
            kwargs["pin"] = args.pin

        if args.sample_period is not None:
            kwargs["sample_period"] = args.sample_period

        if args.sensor is not None:
            kwargs["sensor"] = args.sensor

        if args.log_level is not None:
            kwargs["log_level"] = args.log_level

        if args.debug is True:
            kwargs["debug"] = True

        return cls(**kwargs)  # type: ignore[arg-type]

    def setup_logging(self) -> None:
        """Configure logging based on this config."""
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
