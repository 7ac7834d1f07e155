from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from soleerp.models import RETURN, SALE, AppState, SaleRecord, StockItem
from soleerp.utils import iso_now, new_id

logger = logging.getLogger(__name__)

APPLIED = "applied"
NOT_FOUND = "not_found"
INSUFFICIENT_STOCK = "insufficient_stock"
ALREADY_RETURNED = "already_returned"
INVALID_QUANTITY = "invalid_quantity"


@dataclass
class LedgerResult:
    """
    Outcome of a ledger event.

    Ledger events never raise: a rejected event leaves the state untouched and
    reports why through `reason`.
    """

    applied: bool
    reason: str = APPLIED
    record: Optional[SaleRecord] = None


def _skipped(reason: str) -> LedgerResult:
    return LedgerResult(applied=False, reason=reason)


def find_stock(state: AppState, product_id: str, branch_id: str) -> Optional[StockItem]:
    return next(
        (s for s in state.stock if s.product_id == product_id and s.branch_id == branch_id),
        None,
    )


def stock_quantity(state: AppState, product_id: str, branch_id: str) -> int:
    row = find_stock(state, product_id, branch_id)
    return int(row.quantity) if row else 0


def global_quantity(state: AppState, product_id: str) -> int:
    return sum(int(s.quantity) for s in state.stock if s.product_id == product_id)


def _adjust(state: AppState, product_id: str, branch_id: str, delta: int, *, create: bool = True) -> bool:
    """
    Add `delta` to the (product, branch) cell.

    A missing cell is created at `delta` when `create` is set, otherwise the
    adjustment is dropped and False is returned.
    """
    row = find_stock(state, product_id, branch_id)
    if row is not None:
        row.quantity = int(row.quantity) + int(delta)
        return True
    if not create:
        return False
    state.stock.append(
        StockItem(id=new_id("ST"), product_id=product_id, branch_id=branch_id, quantity=int(delta))
    )
    return True


def apply_sale(state: AppState, sale: SaleRecord) -> LedgerResult:
    """
    Record a checkout and take its items out of the sale's branch.

    Overselling is allowed: a line for a product the branch has never stocked
    opens the cell at a negative quantity.
    """
    for item in sale.items:
        _adjust(state, item.product_id, sale.branch_id, -int(item.quantity))
    state.sales.insert(0, sale)
    return LedgerResult(applied=True, record=sale)


def apply_purchase_entry(state: AppState, product_id: str, branch_id: str, quantity: int) -> LedgerResult:
    if int(quantity) <= 0:
        return _skipped(INVALID_QUANTITY)
    _adjust(state, product_id, branch_id, int(quantity))
    return LedgerResult(applied=True)


def apply_transfer(
    state: AppState,
    product_id: str,
    from_branch_id: str,
    to_branch_id: str,
    quantity: int,
) -> LedgerResult:
    if int(quantity) <= 0:
        return _skipped(INVALID_QUANTITY)

    source = find_stock(state, product_id, from_branch_id)
    if source is None:
        return _skipped(NOT_FOUND)
    if int(source.quantity) < int(quantity):
        return _skipped(INSUFFICIENT_STOCK)

    source.quantity = int(source.quantity) - int(quantity)
    _adjust(state, product_id, to_branch_id, int(quantity))
    return LedgerResult(applied=True)


def apply_return(state: AppState, sale_id: str) -> LedgerResult:
    """
    Refund a sale in full.

    The original keeps its place in the list and is flagged is_returned; a new
    RETURN record is appended. Each sale can only be returned once.
    """
    original = state.sale(sale_id)
    if original is None or original.type != SALE:
        return _skipped(NOT_FOUND)
    if original.is_returned:
        return _skipped(ALREADY_RETURNED)

    original.is_returned = True
    refund = replace(
        original,
        id=new_id("RET"),
        type=RETURN,
        date=iso_now(),
        items=[replace(i) for i in original.items],
        final_amount=-original.final_amount,
        is_returned=False,
        original_sale_id=original.id,
    )
    state.sales.append(refund)

    for item in original.items:
        if not _adjust(state, item.product_id, original.branch_id, int(item.quantity), create=False):
            logger.warning(
                "Return %s: no stock cell for %s at %s, quantity not restored",
                refund.id,
                item.product_id,
                original.branch_id,
            )
    return LedgerResult(applied=True, record=refund)


def delete_transaction(state: AppState, sale_id: str) -> LedgerResult:
    """
    Remove a SALE or RETURN record and undo its stock effect.

    The reversal is applied to whatever the cells hold now; nothing checks
    that the result stays non-negative.
    """
    record = state.sale(sale_id)
    if record is None:
        return _skipped(NOT_FOUND)

    sign = 1 if record.type == SALE else -1
    for item in record.items:
        _adjust(state, item.product_id, record.branch_id, sign * int(item.quantity), create=False)

    state.sales = [s for s in state.sales if s.id != sale_id]
    return LedgerResult(applied=True, record=record)
