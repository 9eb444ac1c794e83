"""Ledger loading and the in-memory Ledger Store.

The ledger is read once, converted into :class:`~finance_narrative.models.Transaction`
records and kept as an immutable, date-ordered tuple for the lifetime of
the process.  All type conversion happens here; the series builders
receive typed records only.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from . import config
from .logging_setup import get_logger
from .models import Account, InvalidAmountError, LedgerError, Transaction
from .money import to_decimal

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("date", "account", "category", "type", "amount", "description")
ENCODINGS = ("utf-8", "utf-8-sig", "latin-1", "cp1252")


# ---------------------------------------------------------------------------
# Ledger Store
# ---------------------------------------------------------------------------


class LedgerStore:
    """Immutable snapshot of the transactions for the analysis period."""

    def __init__(self, transactions: Iterable[Transaction]):
        if transactions is None:
            raise LedgerError("LedgerStore: transactions must not be None")
        # sorted() is stable, so same-day entries keep their file order
        self._transactions: Tuple[Transaction, ...] = tuple(
            sorted(transactions, key=lambda t: t.date)
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "LedgerStore":
        """Validate and convert a raw ledger DataFrame."""
        if df is None:
            raise LedgerError("Ledger frame must not be None")
        columns = {str(col).strip().lower(): col for col in df.columns}
        missing = [col for col in REQUIRED_COLUMNS if col not in columns and col != "description"]
        if missing:
            raise LedgerError(f"Ledger is missing required columns: {', '.join(missing)}")

        working = df.rename(columns={original: key for key, original in columns.items()})
        if "description" not in working.columns:
            working["description"] = ""

        parsed_dates = pd.to_datetime(working["date"], errors="coerce")
        transactions: List[Transaction] = []
        for position, (idx, row) in enumerate(working.iterrows()):
            transactions.append(_row_to_transaction(position, row, parsed_dates.loc[idx]))
        return cls(transactions)

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def for_account(self, account: Account) -> List[Transaction]:
        return [t for t in self._transactions if t.account == account]

    def checking(self) -> List[Transaction]:
        return self.for_account(Account.CHECKING)

    def savings_deposits(self, category: str = config.SAVINGS_CATEGORY) -> List[Transaction]:
        """Recorded deposits into the savings account."""
        return [
            t for t in self._transactions
            if t.account == Account.SAVINGS and t.category == category
        ]

    def period(self) -> Optional[Tuple[date, date]]:
        """First and last transaction dates, or ``None`` for an empty ledger."""
        if not self._transactions:
            return None
        return self._transactions[0].date, self._transactions[-1].date

    def to_frame(self) -> pd.DataFrame:
        """Return the ledger as a DataFrame (amounts as floats) for display."""
        rows = [
            {
                "date": pd.Timestamp(t.date),
                "account": t.account.value,
                "category": t.category,
                "type": t.type,
                "amount": float(t.amount),
                "description": t.description,
            }
            for t in self._transactions
        ]
        return pd.DataFrame(rows, columns=list(REQUIRED_COLUMNS))


def _row_to_transaction(position: int, row: pd.Series, parsed_date) -> Transaction:
    if pd.isna(parsed_date):
        raise LedgerError(f"Row {position}: unable to parse date {row['date']!r}")
    try:
        account = Account.parse(row["account"])
    except ValueError as exc:
        raise LedgerError(f"Row {position}: {exc}") from exc
    raw_amount = row["amount"]
    if pd.isna(raw_amount):
        raise LedgerError(f"Row {position}: amount is missing")
    try:
        amount = to_decimal(raw_amount)
    except InvalidAmountError as exc:
        raise LedgerError(f"Row {position}: {exc}") from exc
    return Transaction(
        date=parsed_date.date(),
        account=account,
        category=_clean_text(row["category"]),
        type=_clean_text(row["type"]),
        amount=amount,
        description=_clean_text(row["description"]),
    )


def _clean_text(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def _read_csv(source, label, **kwargs) -> pd.DataFrame:
    try:
        return pd.read_csv(source, **kwargs)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise LedgerError(f"Unable to read ledger {label}: {exc}") from exc


def read_ledger_frame(path_or_buffer) -> pd.DataFrame:
    """Read a ledger CSV into a DataFrame with amounts kept as text.

    Empty or malformed files are reported as :class:`LedgerError`.
    """
    csv_kwargs = {"index_col": False, "dtype": {"amount": str}}

    if hasattr(path_or_buffer, "read"):
        return _read_csv(path_or_buffer, getattr(path_or_buffer, "name", "upload"), **csv_kwargs)

    path = Path(path_or_buffer)
    if path.suffix.lower() not in {".csv", ""}:
        raise LedgerError(f"Unsupported ledger file extension '{path.suffix}'.")
    if not path.exists():
        raise LedgerError(f"Ledger file not found: {path}")
    for encoding in ENCODINGS:
        try:
            return _read_csv(path, path, encoding=encoding, **csv_kwargs)
        except UnicodeDecodeError:
            continue
    raise LedgerError(f"Unable to decode ledger file {path}")


def load_ledger(path_or_buffer=None) -> LedgerStore:
    """Load the ledger file (defaults to ``config.LEDGER_PATH``)."""
    source = path_or_buffer if path_or_buffer is not None else config.LEDGER_PATH
    store = LedgerStore.from_frame(read_ledger_frame(source))
    span = store.period()
    if span:
        logger.info("Loaded %d transactions spanning %s to %s", len(store), span[0], span[1])
    else:
        logger.info("Loaded an empty ledger from %s", getattr(source, "name", source))
    return store


def ledger_from_records(records: Sequence[dict]) -> LedgerStore:
    """Build a store from plain dict rows (as produced by ``csv.DictReader``)."""
    return LedgerStore.from_frame(pd.DataFrame(list(records), columns=list(REQUIRED_COLUMNS)))
