from __future__ import annotations

from typing import Iterable, Optional

from soleerp.models import EXPENSE_CATEGORIES, AppState, Expense
from soleerp.utils import iso_today, new_id


def add_expense(
    state: AppState,
    *,
    branch_id: str,
    category: str,
    description: str,
    amount: float,
    date: Optional[str] = None,
) -> Expense:
    if category not in EXPENSE_CATEGORIES:
        raise ValueError(f"Invalid expense category. Use one of: {', '.join(EXPENSE_CATEGORIES)}.")
    if not branch_id:
        raise ValueError("Branch is required.")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise ValueError("Amount must be a number.")
    if amount <= 0:
        raise ValueError("Amount must be > 0.")

    expense = Expense(
        id=new_id("EXP"),
        branch_id=str(branch_id),
        category=category,
        description=str(description or "").strip(),
        amount=amount,
        date=date or iso_today(),
    )
    state.expenses.insert(0, expense)
    return expense


def delete_expense(state: AppState, expense_id: str) -> bool:
    before = len(state.expenses)
    state.expenses = [e for e in state.expenses if e.id != expense_id]
    return len(state.expenses) != before


def expenses_for(state: AppState, branch_ids: Iterable[str]) -> list[Expense]:
    scope = set(branch_ids)
    return [e for e in state.expenses if e.branch_id in scope]
