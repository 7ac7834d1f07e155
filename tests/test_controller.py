from __future__ import annotations

import pytest

from soleerp.controller import AccessDenied, AppController
from soleerp.repository import StateRepository
from soleerp.services import ledger
from soleerp.services.sales import CartLine


def _reload(conn):
    return AppController(StateRepository(conn))


def test_login_and_logout(controller, conn):
    assert controller.login("admin", "nope") is None
    assert not controller.state.is_authenticated

    user = controller.login("manager", "manager123")
    assert user.id == "u2"
    assert controller.state.selected_branch_id == "ut-1"

    # another browser session on the same store stays logged out
    other = _reload(conn)
    assert not other.state.is_authenticated
    assert other.state.current_user is None

    controller.logout()
    assert controller.state.current_user is None


def test_checkout_is_persisted(admin, conn):
    p1 = admin.state.product("p1")
    sale = admin.checkout([CartLine(p1, 2)], branch_id="ut-1", discount_percent=10, customer_name="Rahim")

    again = _reload(conn)
    assert again.state.sales[0].id == sale.id
    assert again.state.sales[0].customer_name == "Rahim"
    assert ledger.stock_quantity(again.state, "p1", "ut-1") == 23


def test_rejected_transfer_is_reported(admin):
    res = admin.transfer_stock("p5", "ut-1", "wh", 50)
    assert not res.applied
    assert res.reason == ledger.INSUFFICIENT_STOCK

    with pytest.raises(ValueError):
        admin.transfer_stock("p1", "wh", "wh", 1)


def test_return_then_delete(admin, conn):
    assert admin.process_return("s1").applied
    assert not admin.process_return("s1").applied
    assert admin.delete_sale("s1").applied
    assert _reload(conn).state.sale("s1") is None


def test_seller_permissions(controller):
    controller.login("seller", "seller123")
    with pytest.raises(AccessDenied):
        controller.delete_sale("s1")
    with pytest.raises(AccessDenied):
        controller.add_stock("p1", "ut-1", 5)
    with pytest.raises(AccessDenied):
        controller.update_settings(vat_rate=10)
    with pytest.raises(AccessDenied):
        controller.reset_to_defaults()
    with pytest.raises(AccessDenied):
        controller.load_demo_activity()
    assert controller.state.sale("s1") is not None
    assert len(controller.state.sales) == 2


def test_anonymous_cannot_sell(controller):
    with pytest.raises(AccessDenied):
        controller.checkout([CartLine(controller.state.product("p1"), 1)], branch_id="ut-1")


def test_update_settings(admin, conn):
    admin.update_settings(vat_rate=7.5, app_name="  ")
    with pytest.raises(ValueError):
        admin.update_settings(vat_rate=120)

    again = _reload(conn)
    assert again.state.vat_rate == 7.5
    assert again.state.app_name == "SoleERP"


def test_payroll_through_controller(admin, conn):
    admin.process_salary("u2", "October 2023", bonus=5000)
    again = _reload(conn)
    assert again.state.salary_payments[0].amount == 50000
    assert again.state.expenses[0].category == "Salary"


def test_reset_to_defaults_keeps_session(admin, conn):
    admin.add_branch(name="Gulshan")
    admin.load_demo_activity(seed=1)
    admin.reset_to_defaults()

    assert admin.state.current_user.id == "u1"
    again = _reload(conn)
    assert len(again.state.branches) == 4
    assert [s.id for s in again.state.sales] == ["s1", "s2"]


def test_demo_activity_goes_through_ledger(admin):
    before = len(admin.state.sales)
    n = admin.load_demo_activity(seed=3)
    assert n > 0
    assert len(admin.state.sales) == before + n


def test_refresh_picks_up_other_sessions(admin, conn):
    seller = _reload(conn)
    seller.login("seller", "seller123")

    sale = admin.checkout([CartLine(admin.state.product("p1"), 1)], branch_id="ut-1")
    admin.update_user("u3", role_id="r1")

    seller.refresh()
    assert seller.state.sale(sale.id) is not None
    assert ledger.stock_quantity(seller.state, "p1", "ut-1") == 24
    assert seller.state.current_user.role == "MANAGER"
    assert seller.state.is_authenticated
    assert admin.state.current_user.id == "u1"


def test_refresh_closes_session_of_removed_user(admin, conn):
    seller = _reload(conn)
    seller.login("seller", "seller123")
    admin.delete_user("u3")

    seller.refresh()
    assert seller.state.current_user is None
    assert not seller.state.is_authenticated
