import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .account import AccountState
from .multiplier import DEFAULT_MULTIPLIER
from .sizer import CONSERVATIVE_FALLBACK_FACTOR, PositionParameters, SizingMethod


@dataclass
class AppConfig:
    settings: Dict[str, Any]

    @classmethod
    def load(cls, settings_path: Path) -> "AppConfig":
        return cls(settings=_load_yaml(settings_path))

    def account(self) -> AccountState:
        account_cfg = self.settings.get("account", {})
        defaults = AccountState()
        return AccountState(
            capital=float(account_cfg.get("capital", defaults.capital)),
            risk_percent=float(account_cfg.get("risk_percent", defaults.risk_percent)),
        )

    def default_multiplier(self) -> float:
        return float(self.settings.get("history", {}).get("default_multiplier", DEFAULT_MULTIPLIER))

    def conservative_factor(self) -> float:
        return float(self.settings.get("history", {}).get("conservative_factor", CONSERVATIVE_FALLBACK_FACTOR))

    def position(self) -> PositionParameters:
        position_cfg = self.settings.get("position", {})
        defaults = PositionParameters()
        return PositionParameters(
            avg_multiplier=_optional_float(position_cfg.get("avg_multiplier", self.default_multiplier())),
            take_profit=_optional_float(position_cfg.get("take_profit", defaults.take_profit)),
            stop_loss=_optional_float(position_cfg.get("stop_loss", defaults.stop_loss)),
            premium=_optional_float(position_cfg.get("premium", defaults.premium)),
            lot_size=_optional_float(position_cfg.get("lot_size", defaults.lot_size)),
            method=SizingMethod.parse(position_cfg.get("method", defaults.method)),
        )

    def observations(self) -> List[Tuple[Optional[float], Optional[float]]]:
        pairs = []
        for entry in self.settings.get("observations", []) or []:
            pairs.append((_optional_float(entry.get("option_change")), _optional_float(entry.get("underlying_change"))))
        return pairs


def _optional_float(value: Any) -> Optional[float]:
    # Blank entries stay None so they read as unset rather than as zero.
    if value is None:
        return None
    return float(value)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file missing: {path}")
    with path.open() as f:
        return yaml.safe_load(f) or {}


def setup_logging(config: Dict[str, Any]) -> None:
    level = config.get("logging", {}).get("level", "INFO").upper()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = config.get("logging", {}).get("log_file")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
