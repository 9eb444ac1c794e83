"""Plotly figures for the finance narrative.

Each function takes read-only values produced by the core (series lists,
a :class:`~finance_narrative.models.ScenarioSnapshot`, or a breakdown
DataFrame) and returns a ``plotly.graph_objects.Figure`` that Streamlit
renders with ``st.plotly_chart``.  No function here mutates its input.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BalancePoint, EventMatch, SavingsPoint, ScenarioEvent, ScenarioSnapshot

ACTUAL_COLOR = "#1f78b4"
COUNTERFACTUAL_COLOR = "#a6cee3"
PROJECTION_COLOR = "#b2df8a"
SAVINGS_COLOR = "#33a02c"
EVENT_COLOR = "#d97706"

Point = Union[BalancePoint, SavingsPoint]


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def format_currency(amount, include_sign: bool = True) -> str:
    """Format an amount as ``-$1,200.00`` (or ``-1,200.00``)."""
    value = float(amount)
    formatted = f"{abs(value):,.2f}"
    prefix = "-" if value < 0 else ""
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def series_frame(series: Optional[Sequence[Point]], value_name: str) -> pd.DataFrame:
    """Convert a balance or savings series into a two-column DataFrame.

    Parameters
    ----------
    series : sequence of BalancePoint or SavingsPoint
        Points in chronological order.
    value_name : str
        Name of the value column (e.g. ``"Balance"``).

    Returns
    -------
    pandas.DataFrame
        Columns ``Date`` and ``value_name`` with float values.
    """
    rows = []
    for point in series or []:
        value = point.balance if isinstance(point, BalancePoint) else point.savings
        rows.append({"Date": pd.Timestamp(point.date), value_name: float(value)})
    return pd.DataFrame(rows, columns=["Date", value_name])


def event_caption(event: ScenarioEvent, match: EventMatch) -> str:
    if match.exact:
        return f"{event.label or event.category} caused dip"
    return f"Near {(event.label or event.category).lower()}"


def balance_figure(snapshot: ScenarioSnapshot, event: Optional[ScenarioEvent] = None) -> go.Figure:
    """Checking balance over time with the active counterfactual overlaid.

    When the snapshot carries an event match, the point is marked and
    annotated; approximate matches are labelled as "near" the event.
    """
    actual = series_frame(snapshot.balance_series, "Balance")
    if actual.empty:
        return _empty_figure()

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=actual["Date"], y=actual["Balance"], mode="lines",
        name="Actual balance", line=dict(color=ACTUAL_COLOR, width=2),
    ))

    params = snapshot.parameters
    if snapshot.counterfactual_series is not None:
        name = "Without travel" if not params.travel_included else "Travel split across two months"
        alt = series_frame(snapshot.counterfactual_series, "Balance")
        fig.add_trace(go.Scatter(
            x=alt["Date"], y=alt["Balance"], mode="lines",
            name=name, line=dict(color=COUNTERFACTUAL_COLOR, width=2, dash="dash"),
        ))

    if event is not None and snapshot.event is not None:
        point = snapshot.event.point
        fig.add_trace(go.Scatter(
            x=[pd.Timestamp(point.date)], y=[float(point.balance)], mode="markers",
            name=event.label or event.category, marker=dict(color=EVENT_COLOR, size=12),
            showlegend=False,
        ))
        fig.add_annotation(
            x=pd.Timestamp(point.date),
            y=float(point.balance),
            text=(
                f"<b>{event_caption(event, snapshot.event)}</b><br>"
                f"{event.date.strftime('%b %d')} {format_currency(event.amount).replace('.00', '')}"
            ),
            showarrow=True,
            arrowcolor=EVENT_COLOR,
            ax=60,
            ay=-50,
            bordercolor=EVENT_COLOR,
            bgcolor="#fffbeb",
        )
    elif event is not None and not params.travel_included:
        fig.add_annotation(
            xref="paper", yref="paper", x=0.01, y=0.99, showarrow=False,
            text=f"<b>{event.label or event.category} removed; balance improves in {event.date.strftime('%B')}</b>",
            font=dict(color="#065f46"),
        )

    fig.update_layout(
        title="Checking Account Balance Over Time",
        xaxis_title="Date",
        yaxis_title="Balance",
        hovermode="x unified",
    )
    return fig


def savings_figure(snapshot: ScenarioSnapshot) -> go.Figure:
    """Cumulative savings: recorded deposits vs. the projection for the chosen rate."""
    projected = series_frame(snapshot.projection_series, "Savings")
    actual = series_frame(snapshot.actual_savings_series, "Savings")
    if projected.empty and actual.empty:
        return _empty_figure()

    rate_pct = float(snapshot.parameters.savings_rate) * 100
    fig = go.Figure()
    if not actual.empty:
        fig.add_trace(go.Scatter(
            x=actual["Date"], y=actual["Savings"], mode="lines+markers",
            name="Actual savings", line=dict(color=SAVINGS_COLOR, width=2),
        ))
    if not projected.empty:
        fig.add_trace(go.Scatter(
            x=projected["Date"], y=projected["Savings"], mode="lines",
            name=f"Projected at {rate_pct:.0f}%", line=dict(color=PROJECTION_COLOR, width=2),
        ))
    fig.update_layout(
        title="Cumulative Savings: Actual vs Projected",
        xaxis_title="Date",
        yaxis_title="Savings",
    )
    return fig


def spending_figure(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Stacked monthly spending bars, one colour per category."""
    if breakdown is None or breakdown.empty:
        return _empty_figure()
    fig = px.bar(breakdown, x="Month", y="Spent", color="Category")
    fig.update_layout(
        title=title or "Monthly Spending by Category",
        xaxis_title="Month",
        yaxis_title="Spent",
        barmode="stack",
    )
    return fig


def category_pie_figure(totals: pd.Series, title: str | None = None) -> go.Figure:
    """Share of total spending per category."""
    if totals is None or totals.empty:
        return _empty_figure()
    df = totals.reset_index()
    df.columns = ["Category", "Spent"]
    fig = px.pie(df, names="Category", values="Spent")
    fig.update_layout(title=title or "Spending share by category")
    return fig
