"""Pydantic domain models for Household Ledger."""

from decimal import Decimal
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    field_validator,
    model_validator,
)

from .money import Money

# ============================================================================
# Group Models
# ============================================================================


class Member(BaseModel):
    """A group member. Owned by group management; opaque to the engine."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


# ============================================================================
# Expense Models
# ============================================================================


class SplitPolicy(str, Enum):
    """How an expense total is divided among its participants."""

    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"
    SHARES = "shares"


class Split(BaseModel):
    """One participant's raw split entry.

    Which field is populated depends on the expense's policy:
    - equal: none (resolved by even division)
    - exact: amount
    - percentage: percentage, 0-100 with fractional precision
    - shares: weight, a positive integer
    """

    model_config = ConfigDict(frozen=True)

    member_id: int
    amount: Money | None = None
    percentage: Decimal | None = None
    weight: StrictInt | None = None


class Expense(BaseModel):
    """A recorded expense. The engine only ever reads a snapshot of these."""

    model_config = ConfigDict(frozen=True)

    id: int
    group_id: int
    payer_id: int
    total: Money
    policy: SplitPolicy = SplitPolicy.EQUAL
    splits: list[Split]  # order matters for remainder placement
    description: str | None = None
    is_settlement: bool = False  # True = recorded settle-up payment

    @field_validator("total")
    @classmethod
    def total_must_be_positive(cls, v: Money) -> Money:
        if v.amount <= 0:
            raise ValueError("Expense total must be greater than zero")
        return v

    @property
    def currency(self) -> str:
        return self.total.currency

    @property
    def participant_ids(self) -> list[int]:
        return [split.member_id for split in self.splits]


class ResolvedSplit(BaseModel):
    """A participant's owed share after split resolution."""

    model_config = ConfigDict(frozen=True)

    member_id: int
    amount: Money


# ============================================================================
# Settlement Models
# ============================================================================


class Debt(BaseModel):
    """A suggested settle-up payment from a debtor to a creditor."""

    model_config = ConfigDict(frozen=True)

    from_member_id: int
    to_member_id: int
    amount: Money

    @model_validator(mode="after")
    def check_debt(self) -> "Debt":
        if self.amount.amount <= 0:
            raise ValueError("Debt amount must be positive")
        if self.from_member_id == self.to_member_id:
            raise ValueError("Debt must be between two different members")
        return self


class CurrencySummary(BaseModel):
    """Balances and suggested payments for one currency."""

    model_config = ConfigDict(frozen=True)

    currency: str
    debts: list[Debt]
    balances: dict[int, Money]  # member_id -> signed balance


class GroupDebtSummary(BaseModel):
    """The read model returned for a group: one entry per observed currency."""

    model_config = ConfigDict(frozen=True)

    group_id: int
    currencies: dict[str, CurrencySummary] = Field(default_factory=dict)

    @property
    def member_balances(self) -> dict[int, dict[str, Money]]:
        """Balances regrouped as member_id -> currency -> Money."""
        out: dict[int, dict[str, Money]] = {}
        for currency, summary in self.currencies.items():
            for member_id, balance in summary.balances.items():
                out.setdefault(member_id, {})[currency] = balance
        return dict(sorted(out.items()))


class MemberDebtSummary(BaseModel):
    """One member's "you owe / you are owed" view of a group summary."""

    model_config = ConfigDict(frozen=True)

    member_id: int
    balances: dict[str, Money]
    owes: list[Debt]  # payments this member should make
    owed: list[Debt]  # payments this member should receive


# ============================================================================
# Snapshot Models
# ============================================================================


class GroupSnapshot(BaseModel):
    """A consistent, already-loaded view of one group's members and expenses."""

    model_config = ConfigDict(frozen=True)

    group_id: int
    members: list[Member]
    expenses: list[Expense] = Field(default_factory=list)

    @property
    def member_ids(self) -> set[int]:
        return {member.id for member in self.members}
