"""Display helpers for the calculator's state.

Nothing here feeds back into sizing; values are only shaped for a person to
read. Lots are shown to three decimals, money and percentages to two.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

import pandas as pd

from .calculator import CalculatorSnapshot
from .multiplier import MultiplierObservation
from .sizer import SizingResult

HISTORY_COLUMNS = ["option_change", "underlying_change", "multiplier"]


def projected_premiums(premium: float, result: SizingResult) -> Tuple[float, float]:
    """Return the option premium after the take-profit and stop-loss moves."""

    at_tp = premium * (1 + result.option_move_tp / 100)
    at_sl = premium * (1 - result.option_move_sl / 100)
    return at_tp, at_sl


def history_frame(history: Sequence[MultiplierObservation]) -> pd.DataFrame:
    """Tabulate observations newest first.

    Args:
        history: Observations in the order they were recorded.

    Returns:
        DataFrame with ``option_change``, ``underlying_change`` and
        ``multiplier`` columns. The index keeps each row's recording position.
    """

    frame = pd.DataFrame(
        [(obs.option_change, obs.underlying_change, obs.multiplier) for obs in history],
        columns=HISTORY_COLUMNS,
        dtype=float,
    )
    return frame.iloc[::-1]


def _signed(value: float) -> str:
    return f"+{value:.2f}" if value > 0 else f"{value:.2f}"


def format_observation(obs: MultiplierObservation) -> str:
    return (
        f"Multiplier: {obs.multiplier:.2f}x | "
        f"Option: {_signed(obs.option_change)}% | "
        f"Underlying: {_signed(obs.underlying_change)}%"
    )


def trade_plan_lines(snapshot: CalculatorSnapshot) -> List[str]:
    """Cost, risk and reward as shares of capital and of the position.

    Empty unless there is something to buy.
    """

    result = snapshot.result
    if result.lots_to_buy <= 0:
        return []
    premium = snapshot.params.premium or 0.0
    cost_pct = result.total_premium / snapshot.capital * 100
    risk_pct = result.potential_loss / result.total_premium * 100
    reward_pct = result.potential_profit / result.total_premium * 100
    return [
        f"Buy {result.lots_to_buy:.3f} lots (size: {snapshot.params.lot_size}) at ${premium:.2f}/contract",
        f"Total cost: ${result.total_premium:.2f} ({cost_pct:.2f}% of capital)",
        f"Risk: ${result.potential_loss:.2f} ({risk_pct:.2f}% of position)",
        f"Reward: ${result.potential_profit:.2f} ({reward_pct:.2f}% of position)",
    ]


def summary_lines(snapshot: CalculatorSnapshot) -> List[str]:
    result = snapshot.result
    premium = snapshot.params.premium or 0.0
    at_tp, at_sl = projected_premiums(premium, result)
    lines = [
        f"Risk amount: ${snapshot.risk_amount:.2f}",
        f"Method: {snapshot.params.method.value} (multiplier {result.effective_multiplier:.2f}x)",
        f"Option move at TP: +{result.option_move_tp:.2f}% (premium ${premium:.2f} -> ${at_tp:.2f})",
        f"Option move at SL: -{result.option_move_sl:.2f}% (premium ${premium:.2f} -> ${at_sl:.2f})",
        f"Lots to buy: {result.lots_to_buy:.3f} (lot size {snapshot.params.lot_size})",
        f"Total premium: ${result.total_premium:.2f}",
        f"Potential profit: +${result.potential_profit:.2f}",
        f"Potential loss: -${result.potential_loss:.2f}",
    ]
    if snapshot.current_multiplier > 0:
        lines.insert(1, f"Current multiplier: {snapshot.current_multiplier:.2f}x")
    lines.extend(trade_plan_lines(snapshot))
    lines.extend(format_observation(obs) for obs in reversed(snapshot.history))
    return lines
