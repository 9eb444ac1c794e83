"""Monthly spending breakdown for the narrative's spending panel."""

from __future__ import annotations

from typing import Iterable, Optional, Set

import pandas as pd

from . import config
from .models import Transaction

NON_SPENDING_CATEGORIES = {'Income', 'Transfer', 'Transfers', config.SAVINGS_CATEGORY}
BREAKDOWN_COLUMNS = ['Month', 'Category', 'Spent', 'Transaction_Count']


def _outflow_frame(transactions: Iterable[Transaction], exclude_categories: Set[str]) -> pd.DataFrame:
    rows = [
        {
            'Transaction Date': pd.Timestamp(t.date),
            'Category': t.category or 'Uncategorized',
            'Amount': float(t.amount),
        }
        for t in transactions
        if t.amount < 0 and t.category not in exclude_categories
    ]
    return pd.DataFrame(rows, columns=['Transaction Date', 'Category', 'Amount'])


def monthly_spending(
    transactions: Iterable[Transaction],
    *,
    exclude_categories: Optional[Set[str]] = None,
) -> pd.DataFrame:
    """Spending per month and category.

    Only outflows count; income, transfers and savings deposits are
    excluded.  ``Spent`` is reported as a positive amount rounded to cents.
    """
    excluded = NON_SPENDING_CATEGORIES if exclude_categories is None else set(exclude_categories)
    expenses = _outflow_frame(transactions, excluded)
    if expenses.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    expenses['Month'] = expenses['Transaction Date'].dt.to_period('M').astype(str)
    expenses['Amount'] = expenses['Amount'].abs()
    grouped = expenses.groupby(['Month', 'Category']).agg(
        Spent=('Amount', 'sum'),
        Transaction_Count=('Amount', 'count'),
    ).reset_index()
    grouped['Spent'] = grouped['Spent'].round(2)
    grouped = grouped.sort_values(['Month', 'Spent'], ascending=[True, False]).reset_index(drop=True)
    return grouped[BREAKDOWN_COLUMNS]


def category_totals(
    transactions: Iterable[Transaction],
    *,
    exclude_categories: Optional[Set[str]] = None,
) -> pd.Series:
    """Total spending per category over the whole ledger, largest first."""
    breakdown = monthly_spending(transactions, exclude_categories=exclude_categories)
    if breakdown.empty:
        return pd.Series(dtype=float, name='Spent')
    return breakdown.groupby('Category')['Spent'].sum().round(2).sort_values(ascending=False)
