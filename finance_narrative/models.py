"""Record types and errors for the finance narrative core.

Everything here is immutable.  Transactions are converted into these
records once, at the ledger boundary, so that the series builders never
coerce types themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class FinanceNarrativeError(ValueError):
    """Base class for errors raised by the finance narrative package."""


class LedgerError(FinanceNarrativeError):
    """Raised when ledger input cannot be converted into transactions."""


class InvalidAmountError(FinanceNarrativeError):
    """Raised when a monetary value is not a finite number."""


class SeriesInputError(FinanceNarrativeError):
    """Raised when a series builder receives unusable input (e.g. ``None``)."""


class ScenarioParameterError(FinanceNarrativeError):
    """Raised for an out-of-range savings rate or an unknown preset name."""

    def __init__(self, parameter: str, message: str):
        super().__init__(f"{parameter}: {message}")
        self.parameter = parameter


class Account(str, Enum):
    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT = "Credit"

    @classmethod
    def parse(cls, value: str) -> "Account":
        """Match an account label case-insensitively."""
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown account '{value}'")


@dataclass(frozen=True)
class Transaction:
    date: date
    account: Account
    category: str
    type: str
    amount: Decimal
    description: str = ""


@dataclass(frozen=True)
class BalancePoint:
    date: date
    balance: Decimal


@dataclass(frozen=True)
class SavingsPoint:
    date: date
    savings: Decimal


@dataclass(frozen=True)
class ScenarioParameters:
    savings_rate: Decimal
    travel_included: bool = True
    split_travel: bool = False


@dataclass(frozen=True)
class ScenarioEvent:
    """A dated ledger event that the what-if scenarios are written against."""

    category: str
    date: date
    amount: Decimal
    split_dates: Tuple[date, date]
    label: str = ""


@dataclass(frozen=True)
class EventMatch:
    """A located event point.

    ``exact`` is ``False`` when the point came from the nearest-date
    fallback rather than from the event transaction itself.
    """

    point: BalancePoint
    exact: bool


@dataclass(frozen=True)
class SplitOutcome:
    """Split balance series plus the ledger it was folded from."""

    series: List[BalancePoint]
    matched: bool
    transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioSnapshot:
    """Read-only view handed to the rendering layer after each recomputation."""

    balance_series: List[BalancePoint]
    counterfactual_series: Optional[List[BalancePoint]]
    projection_series: List[SavingsPoint]
    actual_savings_series: List[SavingsPoint]
    parameters: ScenarioParameters
    event: Optional[EventMatch] = None
    split_matched: Optional[bool] = None
