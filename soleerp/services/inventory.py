from __future__ import annotations

from typing import Any, Iterable, Optional

import pandas as pd

from soleerp.models import AppState, Product
from soleerp.services import ledger
from soleerp.utils import new_id

PRODUCT_FIELDS = ("name", "brand", "category", "size", "color", "cost_price", "selling_price", "image_url")


def _clean_product_fields(data: dict[str, Any]) -> dict[str, Any]:
    out = dict(data)
    if "name" in out:
        out["name"] = str(out["name"] or "").strip()
        if not out["name"]:
            raise ValueError("Product name is required.")
    for key in ("cost_price", "selling_price"):
        if key in out:
            try:
                out[key] = float(out[key])
            except (TypeError, ValueError):
                raise ValueError(f"{key.replace('_', ' ').capitalize()} must be a number.")
            if out[key] < 0:
                raise ValueError(f"{key.replace('_', ' ').capitalize()} must be >= 0.")
    if "image_url" in out:
        out["image_url"] = str(out["image_url"] or "").strip() or None
    return out


def register_product(
    state: AppState,
    *,
    name: str,
    brand: str,
    category: str,
    size: str,
    color: str,
    cost_price: float,
    selling_price: float,
    image_url: Optional[str] = None,
    initial_branch_id: Optional[str] = None,
    initial_quantity: int = 0,
) -> Product:
    """
    Add a product to the catalogue.

    An opening quantity goes through the ledger as a purchase entry, so it
    lands in the same (product, branch) cell later events use.
    """
    data = _clean_product_fields(
        {
            "name": name,
            "brand": brand,
            "category": category,
            "size": size,
            "color": color,
            "cost_price": cost_price,
            "selling_price": selling_price,
            "image_url": image_url,
        }
    )
    product = Product(id=new_id("P"), **data)
    state.products.append(product)

    if initial_branch_id and int(initial_quantity) > 0:
        ledger.apply_purchase_entry(state, product.id, initial_branch_id, int(initial_quantity))
    return product


def update_product(state: AppState, product_id: str, **changes: Any) -> Product:
    product = state.product(product_id)
    if product is None:
        raise ValueError("Product not found.")
    unknown = set(changes) - set(PRODUCT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown product field(s): {', '.join(sorted(unknown))}")

    for key, value in _clean_product_fields(changes).items():
        setattr(product, key, value)
    return product


def delete_product(state: AppState, product_id: str) -> bool:
    """Drop the product and every stock cell it owns. Sales keep their lines."""
    if state.product(product_id) is None:
        return False
    state.products = [p for p in state.products if p.id != product_id]
    state.stock = [s for s in state.stock if s.product_id != product_id]
    return True


def filter_products(
    state: AppState,
    *,
    search: str = "",
    category: Optional[str] = None,
    branch_id: Optional[str] = None,
    hide_empty: bool = False,
) -> list[Product]:
    needle = str(search or "").strip().lower()
    out: list[Product] = []
    for p in state.products:
        if needle and needle not in p.name.lower() and needle not in p.brand.lower():
            continue
        if category and category != "All" and p.category != category:
            continue
        if branch_id and hide_empty and ledger.stock_quantity(state, p.id, branch_id) <= 0:
            continue
        out.append(p)
    return out


def inventory_frame(state: AppState, products: Optional[Iterable[Product]] = None, branch_id: Optional[str] = None) -> pd.DataFrame:
    rows = []
    for p in state.products if products is None else products:
        qty = (
            ledger.stock_quantity(state, p.id, branch_id)
            if branch_id
            else ledger.global_quantity(state, p.id)
        )
        rows.append(
            {
                "id": p.id,
                "name": p.name,
                "brand": p.brand,
                "category": p.category,
                "size": p.size,
                "color": p.color,
                "cost_price": p.cost_price,
                "selling_price": p.selling_price,
                "quantity": qty,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["id", "name", "brand", "category", "size", "color", "cost_price", "selling_price", "quantity"],
    )


def low_stock(state: AppState, branch_ids: Iterable[str], threshold: int = 10) -> list[dict]:
    scope = set(branch_ids)
    out = []
    for s in state.stock:
        if s.branch_id not in scope or int(s.quantity) >= int(threshold):
            continue
        product = state.product(s.product_id)
        if product is None:
            continue
        out.append(
            {
                "product_id": s.product_id,
                "product": product.name,
                "branch_id": s.branch_id,
                "branch": state.branch_name(s.branch_id),
                "quantity": int(s.quantity),
            }
        )
    return sorted(out, key=lambda r: r["quantity"])


def stock_value(state: AppState, branch_ids: Iterable[str]) -> float:
    scope = set(branch_ids)
    total = 0.0
    for s in state.stock:
        if s.branch_id not in scope:
            continue
        product = state.product(s.product_id)
        total += int(s.quantity) * (float(product.cost_price) if product else 0.0)
    return total
