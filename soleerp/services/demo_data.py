from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from soleerp.models import (
    ADMIN,
    MANAGER,
    SELLER,
    AppState,
    Branch,
    Category,
    Product,
    SaleItem,
    SaleRecord,
    StaffRole,
    StockItem,
    User,
)
from soleerp.services import ledger
from soleerp.services.sales import CartLine, build_sale


def default_categories() -> list[Category]:
    return [
        Category(id="cat1", name="Sneakers"),
        Category(id="cat2", name="Formal"),
        Category(id="cat3", name="Casual"),
        Category(id="cat4", name="Boots"),
        Category(id="cat5", name="Sandals"),
    ]


def default_branches() -> list[Branch]:
    return [
        Branch(id="wh", name="Main Warehouse", location="Industrial Zone"),
        Branch(id="ut-1", name="Uttara Ba Dia Bari", location="Sector 4, Uttara"),
        Branch(id="ban-1", name="Banani Outlet", location="Road 11, Banani"),
        Branch(id="dhk-1", name="Dhanmondi Square", location="Satmasjid Road"),
    ]


def default_staff_roles() -> list[StaffRole]:
    return [
        StaffRole(id="r1", name="Store Manager", access_level=MANAGER),
        StaffRole(id="r2", name="Sales Executive", access_level=SELLER),
        StaffRole(id="r3", name="System Admin", access_level=ADMIN),
    ]


def default_users() -> list[User]:
    return [
        User(
            id="u1", username="admin", role=ADMIN, role_id="r3", full_name="Super Admin",
            base_salary=85000, joining_date="2022-01-01",
        ),
        User(
            id="u2", username="manager", role=MANAGER, role_id="r1", assigned_branch_id="ut-1",
            full_name="Branch Manager (Uttara)", base_salary=45000, joining_date="2022-05-15",
        ),
        User(
            id="u3", username="seller", role=SELLER, role_id="r2", assigned_branch_id="ut-1",
            full_name="Senior Seller (Uttara)", base_salary=22000, joining_date="2023-02-10",
        ),
    ]


def default_products() -> list[Product]:
    return [
        Product("p1", "Air Max 270", "Nike", "Sneakers", "10", "White/Red", 80, 150),
        Product("p2", "Oxford Classic", "Clarks", "Formal", "9", "Brown", 60, 120),
        Product("p3", "Stan Smith", "Adidas", "Sneakers", "8", "Green/White", 45, 95),
        Product("p4", "Chelsea Boot", "Timberland", "Boots", "11", "Tan", 110, 220),
        Product("p5", "Yeezy Boost 350", "Adidas", "Sneakers", "10", "Black Static", 150, 300),
    ]


def default_stock() -> list[StockItem]:
    return [
        StockItem(id="st1", product_id="p1", branch_id="ut-1", quantity=25),
        StockItem(id="st2", product_id="p1", branch_id="wh", quantity=100),
        StockItem(id="st3", product_id="p2", branch_id="ut-1", quantity=5),
        StockItem(id="st4", product_id="p3", branch_id="ban-1", quantity=12),
        StockItem(id="st5", product_id="p4", branch_id="wh", quantity=40),
        StockItem(id="st6", product_id="p5", branch_id="ut-1", quantity=2),
    ]


def default_sales() -> list[SaleRecord]:
    return [
        SaleRecord(
            id="s1", branch_id="ut-1", date="2023-10-01T10:00:00Z",
            items=[SaleItem(product_id="p1", quantity=1, unit_price=150, cost_price=80)],
            total_amount=150, vat=7.5, discount=10, final_amount=147.5,
        ),
        SaleRecord(
            id="s2", branch_id="ban-1", date="2023-10-02T14:30:00Z",
            items=[SaleItem(product_id="p2", quantity=2, unit_price=120, cost_price=60)],
            total_amount=240, vat=12, discount=0, final_amount=252,
        ),
    ]


def default_state() -> AppState:
    """The dataset a fresh install starts from and every bad entry falls back to."""
    branches = default_branches()
    return AppState(
        users=default_users(),
        staff_roles=default_staff_roles(),
        products=default_products(),
        stock=default_stock(),
        sales=default_sales(),
        expenses=[],
        salary_payments=[],
        branches=branches,
        categories=default_categories(),
        selected_branch_id=branches[0].id,
    )


def load_demo_activity(state: AppState, *, seed: int = 7, days: int = 7) -> int:
    """
    Post a week of random checkouts through the ledger so the dashboard has
    something to chart. Returns the number of sales created.
    """
    rng = random.Random(seed)
    shops = [b for b in state.branches if b.id != "wh"] or state.branches
    created = 0
    start = datetime.now(timezone.utc) - timedelta(days=days)

    for d in range(days):
        for _ in range(rng.randint(1, 3)):
            shop = rng.choice(shops)
            product = rng.choice(state.products)
            if ledger.stock_quantity(state, product.id, shop.id) <= 0:
                ledger.apply_purchase_entry(state, product.id, shop.id, rng.randint(5, 20))
            sale = build_sale(
                [CartLine(product=product, quantity=1)],
                branch_id=shop.id,
                vat_rate=state.vat_rate,
                discount_percent=rng.choice([0, 0, 5, 10]),
                customer_name="Walk-in",
            )
            sale.date = (start + timedelta(days=d, hours=rng.randint(9, 20))).replace(microsecond=0).isoformat()
            ledger.apply_sale(state, sale)
            created += 1
    return created
