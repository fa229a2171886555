"""Exception hierarchy for the fan controller."""


class FanControlError(Exception):
    """Base class for all fan controller errors."""


class ConfigLoadError(FanControlError, ValueError):
    """Configuration is unreadable or holds an invalid value."""


class SensorReadError(FanControlError):
    """The temperature sensor could not be read or returned garbage."""


class EmptyWindowError(FanControlError):
    """An average was requested from a sample window with no readings."""


class ActuatorError(FanControlError):
    pass


class ActuatorInitError(ActuatorError):
    pass


class ActuatorWriteError(ActuatorError):
    pass


class ActuatorReleaseError(ActuatorError):
    pass
