"""Time-series derivation from the ledger.

Every builder here is a pure function: it sorts a copy of its input by
date (ties keep their original order), folds it, and returns a freshly
allocated list.  Running totals are rounded to cents after each step
with :func:`~finance_narrative.money.round2`, so a series can be
reproduced exactly from its inputs.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from .logging_setup import get_logger
from .models import (
    Account,
    BalancePoint,
    EventMatch,
    InvalidAmountError,
    SavingsPoint,
    SeriesInputError,
    SplitOutcome,
    Transaction,
)
from .money import ZERO, Number, round2, to_decimal

logger = get_logger(__name__)

MONTHS_PER_YEAR = 12


def _chronological(transactions: Optional[Iterable[Transaction]], component: str) -> List[Transaction]:
    if transactions is None:
        raise SeriesInputError(f"{component}: transactions must not be None")
    return sorted(transactions, key=lambda t: t.date)


def _amount(value: Number, component: str, name: str) -> Decimal:
    try:
        return to_decimal(value)
    except InvalidAmountError as exc:
        raise SeriesInputError(f"{component}: invalid {name}: {exc}") from exc


# ---------------------------------------------------------------------------
# Balance and cumulative folds
# ---------------------------------------------------------------------------


def build_balance_series(transactions: Iterable[Transaction], start_balance: Number) -> List[BalancePoint]:
    """Running balance after each transaction, starting from ``start_balance``.

    Returns one point per transaction in date order.  An empty input gives
    an empty series.
    """
    ordered = _chronological(transactions, "build_balance_series")
    balance = round2(_amount(start_balance, "build_balance_series", "start_balance"))
    series: List[BalancePoint] = []
    for txn in ordered:
        balance = round2(balance + txn.amount)
        series.append(BalancePoint(date=txn.date, balance=balance))
    return series


def build_cumulative_series(entries: Iterable[Transaction]) -> List[SavingsPoint]:
    """Running total of ``entries`` starting at zero.

    The entries are not filtered; callers pass the deposits they want
    accumulated (see :meth:`LedgerStore.savings_deposits`).
    """
    ordered = _chronological(entries, "build_cumulative_series")
    cumulative = ZERO
    series: List[SavingsPoint] = []
    for entry in ordered:
        cumulative = round2(cumulative + entry.amount)
        series.append(SavingsPoint(date=entry.date, savings=cumulative))
    return series


def project_savings(rate: Number, monthly_income: Number, year: int, *, day: int = 2) -> List[SavingsPoint]:
    """Savings trajectory if ``rate`` of ``monthly_income`` were saved each month.

    Produces twelve points, one on ``day`` of every month of ``year``.
    Range validation of ``rate`` belongs to the caller; a rate of zero
    yields an all-zero series.
    """
    rate_value = _amount(rate, "project_savings", "rate")
    income = _amount(monthly_income, "project_savings", "monthly_income")
    contribution = income * rate_value
    cumulative = ZERO
    series: List[SavingsPoint] = []
    for month in range(1, MONTHS_PER_YEAR + 1):
        cumulative = round2(cumulative + contribution)
        series.append(SavingsPoint(date=date(year, month, day), savings=cumulative))
    return series


# ---------------------------------------------------------------------------
# Counterfactual series
# ---------------------------------------------------------------------------


def _matches(txn: Transaction, category: str, on: date) -> bool:
    return txn.category == category and txn.date == on


def build_excluding_event(
    transactions: Iterable[Transaction],
    start_balance: Number,
    category: str,
    exact_date: date,
) -> List[BalancePoint]:
    """Balance series with every ``category`` transaction on ``exact_date`` removed."""
    if transactions is None:
        raise SeriesInputError("build_excluding_event: transactions must not be None")
    kept = [t for t in transactions if not _matches(t, category, exact_date)]
    return build_balance_series(kept, start_balance)


def split_transaction(txn: Transaction, split_dates: Sequence[date]) -> Tuple[Transaction, Transaction]:
    """Split ``txn`` into two halves dated ``split_dates[0]`` and ``split_dates[1]``.

    The first half is rounded to cents and the second takes the remainder,
    so the pair always sums to the original amount.
    """
    if len(split_dates) != 2:
        raise SeriesInputError("split_transaction: exactly two split dates are required")
    first_amount = round2(txn.amount / 2)
    second_amount = txn.amount - first_amount
    description = txn.description or txn.category
    first = replace(txn, date=split_dates[0], amount=first_amount,
                    description=f"{description} (part 1 of 2)")
    second = replace(txn, date=split_dates[1], amount=second_amount,
                     description=f"{description} (part 2 of 2)")
    return first, second


def build_split_event(
    transactions: Iterable[Transaction],
    start_balance: Number,
    category: str,
    exact_date: date,
    original_amount: Number,
    split_dates: Sequence[date],
    *,
    account: Account = Account.CHECKING,
) -> SplitOutcome:
    """Balance series with one transaction replaced by two half-size ones.

    The transaction removed is the first with matching category, date and
    amount.  When none matches, the split pair is still appended (built
    from ``account``/``category``) and the outcome is flagged unmatched.
    """
    if transactions is None:
        raise SeriesInputError("build_split_event: transactions must not be None")
    amount = _amount(original_amount, "build_split_event", "original_amount")

    remaining: List[Transaction] = []
    original: Optional[Transaction] = None
    for txn in transactions:
        if original is None and _matches(txn, category, exact_date) and txn.amount == amount:
            original = txn
            continue
        remaining.append(txn)

    matched = original is not None
    if original is None:
        logger.warning(
            "No %s transaction of %s on %s to split; ledger may have drifted from the scenario",
            category, amount, exact_date.isoformat(),
        )
        original = Transaction(
            date=exact_date,
            account=account,
            category=category,
            type="Expense" if amount < 0 else "Income",
            amount=amount,
            description=f"{category} (split)",
        )

    remaining.extend(split_transaction(original, split_dates))
    return SplitOutcome(
        series=build_balance_series(remaining, start_balance),
        matched=matched,
        transactions=remaining,
    )


# ---------------------------------------------------------------------------
# Event lookup
# ---------------------------------------------------------------------------


def locate_event(
    transactions: Iterable[Transaction],
    start_balance: Number,
    category: str,
    target_date: date,
) -> Optional[BalancePoint]:
    """Balance point at the first ``category`` transaction dated ``target_date``."""
    ordered = _chronological(transactions, "locate_event")
    series = build_balance_series(ordered, start_balance)
    for txn, point in zip(ordered, series):
        if _matches(txn, category, target_date):
            return point
    return None


def nearest_point(series: Optional[Sequence[BalancePoint]], target_date: date) -> Optional[BalancePoint]:
    """Point closest in time to ``target_date``; the earliest wins a tie."""
    if not series:
        return None
    return min(series, key=lambda point: abs((point.date - target_date).days))


def find_event(
    transactions: Iterable[Transaction],
    start_balance: Number,
    category: str,
    target_date: date,
    series: Optional[Sequence[BalancePoint]],
) -> Optional[EventMatch]:
    """Locate an event exactly, falling back to the nearest point in ``series``."""
    point = locate_event(transactions, start_balance, category, target_date)
    if point is not None:
        return EventMatch(point=point, exact=True)
    fallback = nearest_point(series, target_date)
    if fallback is None:
        return None
    return EventMatch(point=fallback, exact=False)
