"""Household Ledger - Shared expense balances and settle-up suggestions."""

__version__ = "0.1.0"

from .balances import aggregate_balances
from .config import Settings, load_settings
from .models import (
    CurrencySummary,
    Debt,
    Expense,
    GroupDebtSummary,
    GroupSnapshot,
    Member,
    MemberDebtSummary,
    ResolvedSplit,
    Split,
    SplitPolicy,
)
from .money import Money, to_minor_units
from .service import DebtSummaryService, member_summary, summarize_group
from .simplifier import apply_debts, simplify_debts
from .splits import resolve_splits

__all__ = [
    "Settings",
    "load_settings",
    "Money",
    "to_minor_units",
    "Member",
    "Split",
    "SplitPolicy",
    "Expense",
    "ResolvedSplit",
    "Debt",
    "CurrencySummary",
    "GroupDebtSummary",
    "GroupSnapshot",
    "MemberDebtSummary",
    "resolve_splits",
    "aggregate_balances",
    "simplify_debts",
    "apply_debts",
    "summarize_group",
    "member_summary",
    "DebtSummaryService",
]
