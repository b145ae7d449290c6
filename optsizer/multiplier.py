import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIER = 65.0


class InvalidInputError(ValueError):
    """Raised when an observation cannot produce a multiplier."""


@dataclass(frozen=True)
class MultiplierObservation:
    option_change: float
    underlying_change: float
    multiplier: float


def is_unset(value: Optional[float]) -> bool:
    """True for values a form would leave blank: ``None``, zero or NaN."""
    if value is None:
        return True
    return value == 0 or math.isnan(value)


def average_multiplier(history: Iterable[MultiplierObservation], default: float) -> float:
    multipliers = [obs.multiplier for obs in history]
    if not multipliers:
        return default
    return sum(multipliers) / len(multipliers)


class MultiplierTracker:
    def __init__(self, default_multiplier: float = DEFAULT_MULTIPLIER):
        self.default_multiplier = default_multiplier
        self.average = default_multiplier
        self.current_multiplier = 0.0
        self._history: List[MultiplierObservation] = []

    def __len__(self) -> int:
        return len(self._history)

    @property
    def history(self) -> Tuple[MultiplierObservation, ...]:
        return tuple(self._history)

    def record_observation(self, option_change: Optional[float], underlying_change: Optional[float]) -> MultiplierObservation:
        if is_unset(option_change) or is_unset(underlying_change):
            raise InvalidInputError("Please enter valid option and underlying changes")

        multiplier = abs(option_change / underlying_change)
        observation = MultiplierObservation(
            option_change=float(option_change),
            underlying_change=float(underlying_change),
            multiplier=multiplier,
        )
        self._history.append(observation)
        self.current_multiplier = multiplier
        # Full rescan rather than a running sum so the mean never drifts.
        self.average = average_multiplier(self._history, self.average)
        logger.debug(
            "Recorded multiplier %.4f (option %.2f%%, underlying %.2f%%); average now %.4f over %d",
            multiplier,
            option_change,
            underlying_change,
            self.average,
            len(self._history),
        )
        return observation

    def max_multiplier(self) -> Optional[float]:
        if not self._history:
            return None
        return max(obs.multiplier for obs in self._history)

    def clear_history(self) -> None:
        """Drop every observation and fall back to the default multiplier.

        Callers are expected to have confirmed the action with the user; the
        tracker does not ask.
        """
        if self._history:
            logger.info("Clearing %d multiplier observations", len(self._history))
        self._history.clear()
        self.average = self.default_multiplier
