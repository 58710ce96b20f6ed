"""Custom exceptions for Household Ledger."""

from typing import Any


class LedgerError(Exception):
    """Base exception for all Household Ledger errors.

    Errors raised while folding a group's expenses are tagged with the
    offending ``expense_id`` and the ``group_id`` being summarized so the
    request layer can report where the failure came from.
    """

    def __init__(self, message: str):
        self.message = message
        self.expense_id: int | None = None
        self.group_id: int | None = None
        super().__init__(message)

    def tag(self, *, expense_id: int | None = None, group_id: int | None = None):
        """Attach location tags without overwriting ones set closer to the source."""
        if expense_id is not None and self.expense_id is None:
            self.expense_id = expense_id
        if group_id is not None and self.group_id is None:
            self.group_id = group_id
        return self

    def __str__(self) -> str:
        parts = []
        if self.group_id is not None:
            parts.append(f"group {self.group_id}")
        if self.expense_id is not None:
            parts.append(f"expense {self.expense_id}")
        if parts:
            return f"{self.message} ({', '.join(parts)})"
        return self.message


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class SnapshotError(LedgerError):
    """Raised when a group snapshot cannot be loaded or parsed."""

    pass


class CurrencyMismatch(LedgerError):
    """Raised when two Money values of different currencies are combined."""

    def __init__(self, left: str, right: str, message: str | None = None):
        self.left = left
        self.right = right
        super().__init__(message or f"Currency mismatch: {left} vs {right}")


class SplitError(LedgerError):
    """Base class for split resolution failures."""

    pass


class SplitSumMismatch(SplitError):
    """Raised when exact split amounts don't add up to the expense total."""

    def __init__(self, delta: Any, message: str | None = None):
        # delta is total - sum(splits), as Money
        self.delta = delta
        super().__init__(
            message
            or f"Split amounts differ from expense total by {delta.amount} "
            f"minor units ({delta.currency})"
        )


class InvalidPercentageSum(SplitError):
    """Raised when split percentages don't sum to 100 within tolerance."""

    def __init__(self, total: Any, message: str | None = None):
        self.total = total
        super().__init__(message or f"Percentages must sum to 100 (got {total})")


class InvalidWeights(SplitError):
    """Raised when share weights are non-positive or sum to zero."""

    pass


class InvalidSplit(SplitError):
    """Raised when a split list is structurally invalid (empty, duplicates, ...)."""

    pass


class UnknownMember(LedgerError):
    """Raised when an expense references a member outside the group."""

    def __init__(self, member_id: int, message: str | None = None):
        self.member_id = member_id
        super().__init__(message or f"Member {member_id} is not part of the group")


class ForeignExpense(LedgerError):
    """Raised when an expense belonging to another group is passed in."""

    pass


class UnbalancedLedger(LedgerError):
    """Raised when balances for a currency don't sum to zero."""

    pass
