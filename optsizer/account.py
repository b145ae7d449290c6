from dataclasses import dataclass


@dataclass
class AccountState:
    capital: float = 10000.0
    risk_percent: float = 2.0

    @property
    def risk_amount(self) -> float:
        """Dollars at risk on a single trade, derived from the current inputs."""
        return self.capital * self.risk_percent / 100
