import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .calculator import PositionCalculator
from .multiplier import InvalidInputError, MultiplierObservation
from .report import summary_lines
from .utils import AppConfig, setup_logging

logger = logging.getLogger(__name__)


def ask_to_clear() -> bool:
    return input("Clear all multiplier history? [y/N] ").strip().lower() in ("y", "yes")


class CalculatorRunner:
    def __init__(self, calculator: PositionCalculator, confirm: Callable[[], bool] = ask_to_clear):
        self.calculator = calculator
        self.confirm = confirm

    @classmethod
    def from_config(cls, config: AppConfig, confirm: Callable[[], bool] = ask_to_clear) -> "CalculatorRunner":
        calculator = PositionCalculator(
            account=config.account(),
            params=config.position(),
            default_multiplier=config.default_multiplier(),
            conservative_factor=config.conservative_factor(),
        )
        return cls(calculator, confirm=confirm)

    def replay(self, observations: Iterable[Tuple[Optional[float], Optional[float]]]) -> List[MultiplierObservation]:
        recorded = []
        for option_change, underlying_change in observations:
            try:
                recorded.append(self.calculator.record_observation(option_change, underlying_change))
            except InvalidInputError as exc:
                logger.warning("Skipping observation (%s, %s): %s", option_change, underlying_change, exc)
        return recorded

    def clear_history(self) -> bool:
        if not self.calculator.history:
            logger.info("Multiplier history already empty")
            return False
        if not self.confirm():
            logger.info("History clear cancelled")
            return False
        self.calculator.clear_history()
        return True

    def report(self) -> List[str]:
        lines = summary_lines(self.calculator.snapshot())
        for line in lines:
            logger.info(line)
        return lines


def main(settings_path: str = "config/settings.yml") -> None:
    config = AppConfig.load(Path(settings_path))
    setup_logging(config.settings)
    runner = CalculatorRunner.from_config(config)
    runner.replay(config.observations())
    runner.report()


if __name__ == "__main__":
    main()
