from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from .multiplier import DEFAULT_MULTIPLIER, MultiplierObservation, is_unset

CONSERVATIVE_FALLBACK_FACTOR = 1.3


class SizingMethod(str, Enum):
    AVERAGE = "average"
    CONSERVATIVE = "conservative"
    RISK_PARITY = "riskparity"

    @classmethod
    def parse(cls, value) -> "SizingMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported sizing method: {value}") from None


@dataclass
class PositionParameters:
    avg_multiplier: Optional[float] = DEFAULT_MULTIPLIER
    take_profit: Optional[float] = 0.33
    stop_loss: Optional[float] = 2.0
    premium: Optional[float] = 5.0
    lot_size: Optional[float] = 1.0
    method: SizingMethod = SizingMethod.AVERAGE

    def is_complete(self) -> bool:
        required = (self.avg_multiplier, self.take_profit, self.stop_loss, self.premium, self.lot_size)
        return not any(is_unset(value) for value in required)


@dataclass(frozen=True)
class SizingResult:
    option_move_tp: float = 0.0
    option_move_sl: float = 0.0
    lots_to_buy: float = 0.0
    total_premium: float = 0.0
    potential_profit: float = 0.0
    potential_loss: float = 0.0
    effective_multiplier: float = 0.0


ZERO_RESULT = SizingResult()

Strategy = Callable[[float, Sequence[MultiplierObservation], float], float]


def _average(avg_multiplier: float, history: Sequence[MultiplierObservation], factor: float) -> float:
    return avg_multiplier


def _conservative(avg_multiplier: float, history: Sequence[MultiplierObservation], factor: float) -> float:
    if history:
        return max(obs.multiplier for obs in history)
    return avg_multiplier * factor


# riskparity has no formula of its own yet and sizes exactly like average.
STRATEGIES: Dict[SizingMethod, Strategy] = {
    SizingMethod.AVERAGE: _average,
    SizingMethod.CONSERVATIVE: _conservative,
    SizingMethod.RISK_PARITY: _average,
}


def effective_multiplier(
    method,
    avg_multiplier: float,
    history: Sequence[MultiplierObservation],
    conservative_factor: float = CONSERVATIVE_FALLBACK_FACTOR,
) -> float:
    """Pick the multiplier a sizing method uses.

    Args:
        method: A :class:`SizingMethod` or its string value.
        avg_multiplier: Tracked (or manually entered) average multiplier.
        history: Recorded observations, oldest first.
        conservative_factor: Scale applied to the average when the
            conservative method has no history to take a maximum from.
    """

    strategy = STRATEGIES[SizingMethod.parse(method)]
    return strategy(avg_multiplier, history, conservative_factor)


def compute_position(params: PositionParameters, risk_amount: float, multiplier: float) -> SizingResult:
    """Size a position so that hitting the stop loses ``risk_amount``.

    Take profit and stop loss are percent moves of the underlying; scaling by
    ``multiplier`` gives the option's percent move. Lots may be fractional.
    Returns :data:`ZERO_RESULT` while any required parameter is unset.
    """

    if not params.is_complete():
        return ZERO_RESULT

    move_tp = params.take_profit * multiplier
    move_sl = params.stop_loss * multiplier
    premium_per_lot = params.premium * params.lot_size
    loss_per_lot = premium_per_lot * (move_sl / 100)

    if loss_per_lot <= 0:
        return SizingResult(option_move_tp=move_tp, option_move_sl=move_sl, effective_multiplier=multiplier)

    lots = risk_amount / loss_per_lot
    return SizingResult(
        option_move_tp=move_tp,
        option_move_sl=move_sl,
        lots_to_buy=lots,
        total_premium=lots * premium_per_lot,
        potential_profit=lots * premium_per_lot * (move_tp / 100),
        potential_loss=lots * loss_per_lot,
        effective_multiplier=multiplier,
    )
