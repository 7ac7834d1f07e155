from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from soleerp.models import RETURN, SALE, AppState
from soleerp.services.inventory import stock_value

SALES_COLUMNS = [
    "id", "date", "branch", "type", "customer", "items", "total_amount",
    "vat", "discount", "final_amount", "is_returned", "original_sale_id",
]
EXPENSE_COLUMNS = ["id", "date", "branch", "category", "description", "amount"]


@dataclass
class FinancialSummary:
    total_revenue: float
    total_cogs: float
    total_profit: float
    total_expenses: float
    net_profit: float
    stock_value: float


def financial_summary(state: AppState, branch_ids: Iterable[str]) -> FinancialSummary:
    """
    Revenue counts RETURN records at their (negative) final amount, and their
    cost of goods is taken back out of COGS.
    """
    scope = set(branch_ids)
    sales = [s for s in state.sales if s.branch_id in scope]

    revenue = sum(float(s.final_amount) for s in sales if s.type in (SALE, RETURN))
    cogs = sum(s.cost_of_goods if s.type == SALE else -s.cost_of_goods for s in sales)
    expenses = sum(float(e.amount) for e in state.expenses if e.branch_id in scope)
    profit = revenue - cogs

    return FinancialSummary(
        total_revenue=round(revenue, 2),
        total_cogs=round(cogs, 2),
        total_profit=round(profit, 2),
        total_expenses=round(expenses, 2),
        net_profit=round(profit - expenses, 2),
        stock_value=round(stock_value(state, scope), 2),
    )


def sales_frame(state: AppState, branch_ids: Iterable[str]) -> pd.DataFrame:
    scope = set(branch_ids)
    rows = [
        {
            "id": s.id,
            "date": s.date,
            "branch": state.branch_name(s.branch_id),
            "type": s.type,
            "customer": s.customer_name or "Walk-in",
            "items": ", ".join(f"{state.product_name(i.product_id)} x{i.quantity}" for i in s.items),
            "total_amount": s.total_amount,
            "vat": s.vat,
            "discount": s.discount,
            "final_amount": s.final_amount,
            "is_returned": bool(s.is_returned),
            "original_sale_id": s.original_sale_id,
        }
        for s in state.sales
        if s.branch_id in scope
    ]
    df = pd.DataFrame(rows, columns=SALES_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)


def expenses_frame(state: AppState, branch_ids: Iterable[str]) -> pd.DataFrame:
    scope = set(branch_ids)
    rows = [
        {
            "id": e.id,
            "date": e.date,
            "branch": state.branch_name(e.branch_id),
            "category": e.category,
            "description": e.description,
            "amount": e.amount,
        }
        for e in state.expenses
        if e.branch_id in scope
    ]
    df = pd.DataFrame(rows, columns=EXPENSE_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)


def daily_sales(state: AppState, branch_ids: Iterable[str], days: int = 7) -> pd.DataFrame:
    """Net sales per calendar day, last `days` days that had activity."""
    df = sales_frame(state, branch_ids)
    if df.empty:
        return pd.DataFrame(columns=["day", "sales"])
    df["day"] = pd.to_datetime(df["date"], utc=True, format="ISO8601", errors="coerce").dt.date
    out = df.groupby("day", as_index=False)["final_amount"].sum().rename(columns={"final_amount": "sales"})
    return out.sort_values("day").tail(int(days)).reset_index(drop=True)


def category_sales(state: AppState, branch_ids: Iterable[str]) -> pd.DataFrame:
    """Gross line value by product category; lines of deleted products are skipped."""
    scope = set(branch_ids)
    totals: dict[str, float] = {}
    for s in state.sales:
        if s.branch_id not in scope:
            continue
        for item in s.items:
            product = state.product(item.product_id)
            if product is None:
                continue
            totals[product.category] = totals.get(product.category, 0.0) + item.line_total
    return pd.DataFrame(
        [{"category": k, "value": round(v, 2)} for k, v in totals.items()],
        columns=["category", "value"],
    )
