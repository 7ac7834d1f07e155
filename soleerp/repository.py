from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Callable, Iterable

from soleerp.db import ensure_schema, kv_get, kv_put
from soleerp.models import (
    AppState,
    Branch,
    Category,
    Expense,
    Product,
    SalaryPayment,
    SaleRecord,
    StaffRole,
    StockItem,
    User,
)
from soleerp.services.demo_data import default_state

logger = logging.getLogger(__name__)

# state attribute -> (store key, entity type)
LIST_ENTRIES: dict[str, tuple[str, type]] = {
    "users": ("soleerp_users", User),
    "staff_roles": ("soleerp_staff_roles", StaffRole),
    "products": ("soleerp_products", Product),
    "stock": ("soleerp_stock", StockItem),
    "sales": ("soleerp_sales", SaleRecord),
    "expenses": ("soleerp_expenses", Expense),
    "salary_payments": ("soleerp_salaries", SalaryPayment),
    "branches": ("soleerp_showrooms", Branch),
    "categories": ("soleerp_categories", Category),
}

SCALAR_ENTRIES: dict[str, str] = {
    "vat_rate": "soleerp_vat_rate",
    "app_name": "soleerp_app_name",
    "logo_url": "soleerp_logo_url",
}

# Login, current user and selected branch are per browser session and stay out
# of the shared store.
DATA_FIELDS = tuple(LIST_ENTRIES) + tuple(SCALAR_ENTRIES)


def _scalar_parser(default: Any) -> Callable[[Any], Any]:
    if isinstance(default, float):
        return lambda v: float(v)
    return lambda v: str(v)


class StateRepository:
    """
    Load/save AppState through the key-value table.

    Every collection and setting is its own JSON entry. Loading is per entry:
    a missing or unreadable entry falls back to the default dataset without
    affecting the others. Saving is fire-and-forget: a failed write is logged
    and the in-memory state stays authoritative.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        ensure_schema(conn)

    def _read_json(self, key: str) -> Any:
        raw = kv_get(self.conn, key)
        if raw is None:
            raise KeyError(key)
        return json.loads(raw)

    def load(self) -> AppState:
        state = default_state()

        for attr, (key, cls) in LIST_ENTRIES.items():
            try:
                data = self._read_json(key)
                if not isinstance(data, list):
                    raise ValueError("expected a list")
                setattr(state, attr, [cls.from_dict(d) for d in data])
            except KeyError:
                continue
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Entry %s is malformed (%s), using defaults", key, e)

        for attr, key in SCALAR_ENTRIES.items():
            parse = _scalar_parser(getattr(state, attr))
            try:
                setattr(state, attr, parse(self._read_json(key)))
            except KeyError:
                continue
            except (ValueError, TypeError) as e:
                logger.warning("Entry %s is malformed (%s), using default", key, e)

        if state.branch(state.selected_branch_id) is None:
            state.selected_branch_id = state.branches[0].id if state.branches else ""
        return state

    def _serialize(self, state: AppState, attr: str) -> tuple[str, Any]:
        if attr in LIST_ENTRIES:
            key, _ = LIST_ENTRIES[attr]
            return key, [item.to_dict() for item in getattr(state, attr)]
        if attr in SCALAR_ENTRIES:
            return SCALAR_ENTRIES[attr], getattr(state, attr)
        raise KeyError(f"Unknown state field: {attr}")

    def save(self, state: AppState, attrs: Iterable[str]) -> None:
        for attr in attrs:
            key, payload = self._serialize(state, attr)
            try:
                kv_put(self.conn, key, json.dumps(payload))
            except sqlite3.Error:
                logger.exception("Failed to persist %s", key)

    def save_all(self, state: AppState) -> None:
        self.save(state, DATA_FIELDS)
