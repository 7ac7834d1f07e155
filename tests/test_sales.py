from __future__ import annotations

import pytest

from soleerp.models import SALE
from soleerp.services.sales import (
    CartLine,
    add_to_cart,
    build_sale,
    compute_totals,
    remove_from_cart,
    returnable_sales,
)


def test_add_to_cart_caps_at_branch_stock(state):
    cart = []
    p5 = state.product("p5")
    assert add_to_cart(cart, p5, available=2)
    assert add_to_cart(cart, p5, available=2)
    assert not add_to_cart(cart, p5, available=2)
    assert len(cart) == 1
    assert cart[0].quantity == 2


def test_add_to_cart_refuses_out_of_stock(state):
    cart = []
    assert not add_to_cart(cart, state.product("p4"), available=0)
    assert cart == []


def test_remove_from_cart(state):
    cart = [CartLine(state.product("p1"), 1), CartLine(state.product("p2"), 3)]
    remove_from_cart(cart, "p1")
    assert [c.product.id for c in cart] == ["p2"]


def test_compute_totals(state):
    totals = compute_totals([CartLine(state.product("p1"), 2)], vat_rate=5, discount_percent=10)
    assert totals.subtotal == 300
    assert totals.vat == 15
    assert totals.discount == 30
    assert totals.final == 285


def test_final_amount_adds_up_to_the_cent(state):
    p = state.product("p1")
    for cents in range(1, 2000, 7):
        p.selling_price = cents / 100
        for qty in (1, 3):
            for discount in (0, 5, 7, 10, 15):
                t = compute_totals([CartLine(p, qty)], vat_rate=5, discount_percent=discount)
                assert t.final == round(t.subtotal + t.vat - t.discount, 2), (cents, qty, discount, t)

    sale = build_sale([CartLine(p, 3)], branch_id="ut-1", vat_rate=5, discount_percent=15)
    assert sale.final_amount == round(sale.total_amount + sale.vat - sale.discount, 2)


def test_build_sale_snapshots_prices(state):
    p2 = state.product("p2")
    sale = build_sale(
        [CartLine(p2, 2)],
        branch_id="ut-1",
        vat_rate=5,
        customer_name="  Rahim  ",
        customer_phone="",
    )
    assert sale.type == SALE
    assert sale.id.startswith("INV-")
    assert sale.items[0].unit_price == 120
    assert sale.items[0].cost_price == 60
    assert sale.customer_name == "Rahim"
    assert sale.customer_phone is None

    p2.selling_price = 999
    assert sale.items[0].unit_price == 120


def test_build_sale_rejects_empty_cart():
    with pytest.raises(ValueError):
        build_sale([], branch_id="ut-1", vat_rate=5)


@pytest.mark.parametrize("discount", [-1, 150, "abc"])
def test_build_sale_rejects_bad_discount(state, discount):
    with pytest.raises(ValueError):
        build_sale([CartLine(state.product("p1"), 1)], branch_id="ut-1", vat_rate=5, discount_percent=discount)


def test_returnable_sales_respects_scope_and_search(state):
    assert [s.id for s in returnable_sales(state, ["ut-1"])] == ["s1"]
    assert [s.id for s in returnable_sales(state, ["wh", "ut-1", "ban-1", "dhk-1"], search="S2")] == ["s2"]
    assert returnable_sales(state, []) == []
