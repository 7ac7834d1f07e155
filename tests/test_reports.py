from __future__ import annotations

from soleerp.services import ledger
from soleerp.services.expenses import add_expense
from soleerp.services.reports import (
    category_sales,
    daily_sales,
    expenses_frame,
    financial_summary,
    sales_frame,
)

ALL = ["wh", "ut-1", "ban-1", "dhk-1"]


def test_financial_summary_defaults(state):
    s = financial_summary(state, ALL)
    assert s.total_revenue == 399.5
    assert s.total_cogs == 200
    assert s.total_profit == 199.5
    assert s.total_expenses == 0
    assert s.net_profit == 199.5
    assert s.stock_value == 15540


def test_financial_summary_nets_out_returns_and_expenses(state):
    ledger.apply_return(state, "s1")
    add_expense(state, branch_id="ban-1", category="Rent", description="Rent", amount=100)

    s = financial_summary(state, ALL)
    assert s.total_revenue == 252
    assert s.total_cogs == 120
    assert s.total_profit == 132
    assert s.net_profit == 32


def test_financial_summary_is_branch_scoped(state):
    s = financial_summary(state, ["ban-1"])
    assert s.total_revenue == 252
    assert s.total_cogs == 120
    assert s.stock_value == 12 * 45


def test_sales_frame(state):
    df = sales_frame(state, ALL)
    assert list(df["id"]) == ["s2", "s1"]
    assert set(df["customer"]) == {"Walk-in"}
    assert df.loc[df["id"] == "s2", "items"].iloc[0] == "Oxford Classic x2"

    assert sales_frame(state, []).empty


def test_expenses_frame(state):
    add_expense(state, branch_id="ut-1", category="Rent", description="Rent", amount=100, date="2023-10-01")
    df = expenses_frame(state, ["ut-1"])
    assert list(df["branch"]) == ["Uttara Ba Dia Bari"]
    assert expenses_frame(state, ["wh"]).empty


def test_daily_sales(state):
    ledger.apply_return(state, "s1")
    df = daily_sales(state, ALL)
    assert list(df.columns) == ["day", "sales"]
    assert [str(d) for d in df["day"]][:2] == ["2023-10-01", "2023-10-02"]
    assert float(df["sales"].iloc[0]) == 147.5
    # the refund is booked on the day it happened
    assert float(df["sales"].sum()) == 252


def test_category_sales(state):
    df = category_sales(state, ALL)
    values = dict(zip(df["category"], df["value"]))
    assert values == {"Sneakers": 150, "Formal": 240}
