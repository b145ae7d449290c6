import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .account import AccountState
from .multiplier import DEFAULT_MULTIPLIER, MultiplierObservation, MultiplierTracker
from .sizer import (
    CONSERVATIVE_FALLBACK_FACTOR,
    PositionParameters,
    SizingMethod,
    SizingResult,
    compute_position,
    effective_multiplier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculatorSnapshot:
    capital: float
    risk_percent: float
    risk_amount: float
    current_multiplier: float
    params: PositionParameters
    history: Tuple[MultiplierObservation, ...]
    result: SizingResult


class PositionCalculator:
    """Stateful front end to the tracker and the sizing formula.

    Every mutator recomputes the derived values before it returns, so reads
    never see a result that lags its inputs. A single lock serialises writes
    and lets readers take a consistent snapshot.
    """

    def __init__(
        self,
        account: Optional[AccountState] = None,
        params: Optional[PositionParameters] = None,
        *,
        default_multiplier: float = DEFAULT_MULTIPLIER,
        conservative_factor: float = CONSERVATIVE_FALLBACK_FACTOR,
    ):
        self._account = replace(account) if account else AccountState()
        self._params = replace(params) if params else PositionParameters(avg_multiplier=default_multiplier)
        self._conservative_factor = conservative_factor
        self._tracker = MultiplierTracker(default_multiplier)
        self._lock = threading.RLock()
        self._risk_amount = 0.0
        self._result = SizingResult()
        self._recompute()

    def _recompute(self) -> None:
        self._risk_amount = self._account.risk_amount
        history = self._tracker.history
        multiplier = effective_multiplier(
            self._params.method,
            self._params.avg_multiplier or 0.0,
            history,
            self._conservative_factor,
        )
        self._result = compute_position(self._params, self._risk_amount, multiplier)
        logger.debug("Recomputed sizing with %s method: %s", self._params.method.value, self._result)

    def _update_params(self, **changes) -> SizingResult:
        with self._lock:
            self._params = replace(self._params, **changes)
            self._recompute()
            return self._result

    # Account -------------------------------------------------------------

    def set_capital(self, capital: float) -> SizingResult:
        with self._lock:
            self._account.capital = capital
            self._recompute()
            return self._result

    def set_risk_percent(self, risk_percent: float) -> SizingResult:
        with self._lock:
            self._account.risk_percent = risk_percent
            self._recompute()
            return self._result

    # Position parameters -------------------------------------------------

    def set_avg_multiplier(self, value: Optional[float]) -> SizingResult:
        return self._update_params(avg_multiplier=value)

    def set_take_profit(self, value: Optional[float]) -> SizingResult:
        return self._update_params(take_profit=value)

    def set_stop_loss(self, value: Optional[float]) -> SizingResult:
        return self._update_params(stop_loss=value)

    def set_premium(self, value: Optional[float]) -> SizingResult:
        return self._update_params(premium=value)

    def set_lot_size(self, value: Optional[float]) -> SizingResult:
        return self._update_params(lot_size=value)

    def set_method(self, method) -> SizingResult:
        return self._update_params(method=SizingMethod.parse(method))

    # History -------------------------------------------------------------

    def record_observation(self, option_change: Optional[float], underlying_change: Optional[float]) -> MultiplierObservation:
        with self._lock:
            observation = self._tracker.record_observation(option_change, underlying_change)
            self._params = replace(self._params, avg_multiplier=self._tracker.average)
            self._recompute()
            return observation

    def clear_history(self) -> None:
        with self._lock:
            self._tracker.clear_history()
            self._params = replace(self._params, avg_multiplier=self._tracker.average)
            self._recompute()

    # Reads ---------------------------------------------------------------

    @property
    def risk_amount(self) -> float:
        with self._lock:
            return self._risk_amount

    @property
    def result(self) -> SizingResult:
        with self._lock:
            return self._result

    @property
    def capital(self) -> float:
        with self._lock:
            return self._account.capital

    @property
    def risk_percent(self) -> float:
        with self._lock:
            return self._account.risk_percent

    @property
    def conservative_factor(self) -> float:
        return self._conservative_factor

    @property
    def params(self) -> PositionParameters:
        """A copy of the current parameters; change them through the setters."""
        with self._lock:
            return replace(self._params)

    @property
    def avg_multiplier(self) -> Optional[float]:
        with self._lock:
            return self._params.avg_multiplier

    @property
    def current_multiplier(self) -> float:
        with self._lock:
            return self._tracker.current_multiplier

    @property
    def history(self) -> Tuple[MultiplierObservation, ...]:
        with self._lock:
            return self._tracker.history

    def snapshot(self) -> CalculatorSnapshot:
        with self._lock:
            return CalculatorSnapshot(
                capital=self._account.capital,
                risk_percent=self._account.risk_percent,
                risk_amount=self._risk_amount,
                current_multiplier=self._tracker.current_multiplier,
                params=replace(self._params),
                history=self._tracker.history,
                result=self._result,
            )
