from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from soleerp.models import SALE, AppState, Product, SaleItem, SaleRecord
from soleerp.services import ledger
from soleerp.utils import iso_now, money, new_id


@dataclass
class CartLine:
    product: Product
    quantity: int

    @property
    def line_total(self) -> float:
        return float(self.product.selling_price) * int(self.quantity)


@dataclass
class SaleTotals:
    subtotal: float
    vat: float
    discount: float
    final: float


def _normalize_customer(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


def _normalize_percent(value: Optional[float], label: str) -> float:
    if value is None:
        return 0.0
    try:
        pct = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number.")
    if pct < 0 or pct > 100:
        raise ValueError(f"{label} must be between 0 and 100.")
    return pct


def add_to_cart(cart: list[CartLine], product: Product, available: int) -> bool:
    """
    Add one unit of `product`, never exceeding what the branch has on hand.
    Returns False when the branch cannot cover another unit.
    """
    existing = next((c for c in cart if c.product.id == product.id), None)
    if existing is not None:
        if existing.quantity < int(available):
            existing.quantity += 1
            return True
        return False
    if int(available) > 0:
        cart.append(CartLine(product=product, quantity=1))
        return True
    return False


def remove_from_cart(cart: list[CartLine], product_id: str) -> None:
    cart[:] = [c for c in cart if c.product.id != product_id]


def compute_totals(cart: Iterable[CartLine], vat_rate: float, discount_percent: float = 0.0) -> SaleTotals:
    # final is built from the rounded parts so the invoice columns add up
    subtotal = money(sum(c.line_total for c in cart))
    vat = money(subtotal * (float(vat_rate) / 100))
    discount = money(subtotal * (float(discount_percent) / 100))
    return SaleTotals(
        subtotal=subtotal,
        vat=vat,
        discount=discount,
        final=money(subtotal + vat - discount),
    )


def build_sale(
    cart: list[CartLine],
    *,
    branch_id: str,
    vat_rate: float,
    discount_percent: float = 0.0,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
    customer_address: Optional[str] = None,
) -> SaleRecord:
    if not cart:
        raise ValueError("Cart is empty.")
    if not branch_id:
        raise ValueError("Select a branch before checkout.")
    for c in cart:
        if int(c.quantity) <= 0:
            raise ValueError("Item quantity must be > 0.")

    pct = _normalize_percent(discount_percent, "Discount")
    totals = compute_totals(cart, vat_rate, pct)

    return SaleRecord(
        id=new_id("INV"),
        branch_id=str(branch_id),
        date=iso_now(),
        items=[
            SaleItem(
                product_id=c.product.id,
                quantity=int(c.quantity),
                unit_price=float(c.product.selling_price),
                cost_price=float(c.product.cost_price),
            )
            for c in cart
        ],
        total_amount=totals.subtotal,
        vat=totals.vat,
        discount=totals.discount,
        final_amount=totals.final,
        type=SALE,
        customer_name=_normalize_customer(customer_name),
        customer_phone=_normalize_customer(customer_phone),
        customer_address=_normalize_customer(customer_address),
    )


def checkout(state: AppState, cart: list[CartLine], *, branch_id: str, discount_percent: float = 0.0, **customer) -> SaleRecord:
    sale = build_sale(
        cart,
        branch_id=branch_id,
        vat_rate=state.vat_rate,
        discount_percent=discount_percent,
        **customer,
    )
    ledger.apply_sale(state, sale)
    return sale


def returnable_sales(state: AppState, branch_ids: Iterable[str], search: str = "") -> list[SaleRecord]:
    scope = set(branch_ids)
    needle = str(search or "").strip().lower()
    return [
        s
        for s in state.sales
        if s.type == SALE and s.branch_id in scope and needle in s.id.lower()
    ]
