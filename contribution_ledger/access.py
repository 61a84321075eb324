"""Custodian access control and fund withdrawal"""
import logging
from dataclasses import replace
from typing import Optional

from contribution_ledger.errors import (
    InsufficientBalance,
    InvalidIdentity,
    TransferFailed,
    Unauthorized,
)
from contribution_ledger.models.contribution import AccessPolicy
from contribution_ledger.models.events import (
    CustodianChanged,
    FundsWithdrawn,
    MinimumContributionUpdated,
)
from contribution_ledger.services.clock import Clock
from contribution_ledger.services.events import EventSink, publish
from contribution_ledger.services.storage import StorageService
from contribution_ledger.services.vault import Vault

logger = logging.getLogger(__name__)

def is_custodian(policy: AccessPolicy, caller: Optional[str]) -> bool:
    """Capability check: True iff caller holds the custodian role under policy"""
    return bool(caller) and caller == policy.custodian

def require_identity(identity: Optional[str]) -> str:
    """
    Validate an identity supplied by the caller.

    Raises:
        InvalidIdentity: If identity is None, empty or not a string
    """
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidIdentity(f"Invalid identity: {identity!r}")
    return identity

def require_amount(amount: int, name: str = 'amount') -> int:
    # bool is an int subclass but never a valid amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{name} must be an integer, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{name} cannot be negative")
    return amount

class AccessController:
    """
    Owns the access policy and gates every privileged operation.

    Two roles exist: the custodian and everyone else. Withdrawals only move
    value through the vault and never touch the ledger.
    """

    def __init__(self, policy: AccessPolicy, vault: Vault, clock: Clock,
                 events: EventSink, storage: Optional[StorageService] = None):
        require_identity(policy.custodian)
        require_amount(policy.minimum_contribution, 'minimum_contribution')
        self._policy = policy
        self.vault = vault
        self.clock = clock
        self.events = events
        self.storage = storage

    @property
    def policy(self) -> AccessPolicy:
        return replace(self._policy)

    def authorize(self, caller: Optional[str], operation: str = 'perform this operation') -> None:
        """
        Raises:
            Unauthorized: If caller is not the current custodian
        """
        if not is_custodian(self._policy, caller):
            logger.warning(f"Rejected {operation} by non-custodian {caller!r}")
            raise Unauthorized(str(caller), operation)

    def withdraw(self, caller: str, amount: int) -> None:
        """
        Transfer amount from custody to the custodian.

        Raises:
            Unauthorized: If caller is not the custodian
            InsufficientBalance: If amount exceeds the vault balance
            TransferFailed: If the vault reports the transfer failed
        """
        self.authorize(caller, 'withdraw')
        require_amount(amount)

        balance = self.vault.current_balance()
        if amount > balance:
            logger.warning(f"Withdrawal of {amount} exceeds balance {balance}")
            raise InsufficientBalance(amount, balance)

        custodian = self._policy.custodian
        try:
            transferred = self.vault.transfer(custodian, amount)
        except Exception as e:
            logger.warning(f"Vault raised during transfer of {amount} to {custodian}: {e}")
            raise TransferFailed(f"Transfer of {amount} to {custodian} failed: {e}") from e
        if not transferred:
            logger.warning(f"Vault rejected transfer of {amount} to {custodian}")
            raise TransferFailed(f"Transfer of {amount} to {custodian} failed")

        logger.info(f"Withdrew {amount} to custodian {custodian}")
        publish(self.events, FundsWithdrawn(
            occurred_at=self.clock.now(),
            custodian=custodian,
            amount=amount
        ))

    def set_minimum_contribution(self, caller: str, value: int) -> None:
        """Change the threshold for value-bearing contributions"""
        self.authorize(caller, 'set the minimum contribution')
        require_amount(value, 'minimum_contribution')

        previous = self._policy.minimum_contribution
        self._commit(replace(self._policy, minimum_contribution=value))

        logger.info(f"Minimum contribution changed from {previous} to {value}")
        publish(self.events, MinimumContributionUpdated(
            occurred_at=self.clock.now(),
            changed_by=caller,
            previous_minimum=previous,
            new_minimum=value
        ))

    def set_custodian(self, caller: str, new_custodian: str) -> None:
        """Hand the custodian role to another identity"""
        self.authorize(caller, 'change the custodian')
        require_identity(new_custodian)

        previous = self._policy.custodian
        self._commit(replace(self._policy, custodian=new_custodian))

        logger.info(f"Custodian changed from {previous} to {new_custodian}")
        publish(self.events, CustodianChanged(
            occurred_at=self.clock.now(),
            previous_custodian=previous,
            new_custodian=new_custodian
        ))

    def _commit(self, policy: AccessPolicy) -> None:
        # persist first so a storage failure leaves the live policy untouched
        if self.storage is not None:
            self.storage.save_policy(policy)
        self._policy = policy
