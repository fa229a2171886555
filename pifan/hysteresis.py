"""Two-threshold on/off decision for the fan."""

DEFAULT_TEM_MAX = 60.0
DEFAULT_TEM_MIN = 45.0


class HysteresisEngine:
    """Decides whether the fan should run from the smoothed temperature.

    The fan is armed once the average rises strictly above `tem_max`, and the
    target threshold is set to `tem_min`. It stays armed while the average is
    strictly above the target, and disarms (target cleared) as soon as the
    average drops to or below it. Arming and the armed check happen in the
    same update, so no ordering between the two thresholds is enforced.
    """

    def __init__(self, tem_max: float = DEFAULT_TEM_MAX, tem_min: float = DEFAULT_TEM_MIN) -> None:
        self.tem_max = tem_max
        self.tem_min = tem_min
        self._target: float | None = None

    @property
    def target(self) -> float | None:
        """Active target threshold, or None when no cooling is in progress."""
        return self._target

    @property
    def armed(self) -> bool:
        return self._target is not None

    def update(self, average: float) -> bool:
        """Feed one smoothed reading; return True if the fan should be on."""
        if self._target is None and average > self.tem_max:
            self._target = self.tem_min

        if self._target is not None and average > self._target:
            return True

        self._target = None
        return False
