"""Value-transfer collaborator"""
import logging
from typing import Dict, Protocol

logger = logging.getLogger(__name__)


class Vault(Protocol):
    """Holds the value in custody and moves it out on request"""

    def current_balance(self) -> int:
        ...

    def transfer(self, to: str, amount: int) -> bool:
        ...


class InMemoryVault:
    """
    Process-local vault.

    Deposits model value arriving alongside a contribution; transfers move
    it to an external identity and report failure instead of raising.
    """

    def __init__(self, balance: int = 0):
        if balance < 0:
            raise ValueError("Balance cannot be negative")
        self._balance = balance
        self.paid_out: Dict[str, int] = {}

    def current_balance(self) -> int:
        return self._balance

    def deposit(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Deposit amount cannot be negative")
        self._balance += amount

    def transfer(self, to: str, amount: int) -> bool:
        if amount < 0 or amount > self._balance:
            logger.warning(f"Rejected transfer of {amount} to {to}: balance is {self._balance}")
            return False
        self._balance -= amount
        self.paid_out[to] = self.paid_out.get(to, 0) + amount
        return True
