"""Error kinds raised at the ledger operation boundary"""


class LedgerError(Exception):
    """Base exception for contribution ledger errors"""
    pass


class BelowMinimum(LedgerError):
    """Value contribution smaller than the configured minimum"""

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Contribution of {amount} is below the minimum of {minimum}")


class Unauthorized(LedgerError):
    """Caller is not the custodian"""

    def __init__(self, caller: str, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"{caller!r} is not authorized to {operation}")


class InvalidIdentity(LedgerError):
    """Null or empty identity where a real one is required"""
    pass


class IndexOutOfRange(LedgerError):
    """Query for a record index that does not exist"""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Record index {index} out of range (ledger holds {count} records)")


class TransferFailed(LedgerError):
    """The value-transfer collaborator could not move the funds"""
    pass


class InsufficientBalance(TransferFailed):
    """Withdrawal larger than the balance held in custody"""

    def __init__(self, amount: int, balance: int):
        self.amount = amount
        self.balance = balance
        super().__init__(f"Cannot withdraw {amount}: only {balance} available")


class ArithmeticOverflow(LedgerError):
    """A statistics accumulator would exceed its representable range.

    This is an invariant violation rather than a business error; the
    operation that triggered it is aborted without changing any state.
    """
    pass


class InputTooLarge(LedgerError):
    """Note or batch exceeds the configured bounds"""
    pass
