from __future__ import annotations

from datetime import date

import pytest

from soleerp.models import ADMIN, MANAGER
from soleerp.services.staff import (
    DuplicateUsernameError,
    add_role,
    authenticate,
    create_user,
    delete_role,
    delete_user,
    is_paid_for_month,
    month_options,
    process_salary,
    update_role,
    update_user,
)


def test_create_user_defaults(state):
    u = create_user(state, username=" Karim ", full_name="Karim Uddin", role_id="r2", assigned_branch_id="ban-1")
    assert u.username == "karim"
    assert u.role == "SELLER"
    assert u.password == "karim123"
    assert u.assigned_branch_id == "ban-1"
    assert u.status == "ACTIVE"


def test_admin_role_clears_branch(state):
    u = create_user(state, username="boss", full_name="Boss", role_id="r3", assigned_branch_id="ut-1")
    assert u.role == ADMIN
    assert u.assigned_branch_id is None


def test_usernames_are_unique_case_insensitively(state):
    with pytest.raises(DuplicateUsernameError):
        create_user(state, username="ADMIN", full_name="Impostor", role_id="r2")
    with pytest.raises(DuplicateUsernameError):
        update_user(state, "u3", role_id="r2", username="Manager")


def test_create_user_needs_valid_role(state):
    with pytest.raises(ValueError):
        create_user(state, username="temp", full_name="Temp", role_id="r9")


def test_update_user_keeps_unset_fields(state):
    u = update_user(state, "u3", role_id="r1", assigned_branch_id="ut-1", base_salary=30000)
    assert u.role == MANAGER
    assert u.base_salary == 30000
    assert u.full_name == "Senior Seller (Uttara)"
    assert u.username == "seller"


def test_update_user_keeps_branch_unless_given(state):
    u = update_user(state, "u2", role_id="r1", full_name="Renamed")
    assert u.full_name == "Renamed"
    assert u.assigned_branch_id == "ut-1"

    u = update_user(state, "u2", role_id="r1", assigned_branch_id="ban-1")
    assert u.assigned_branch_id == "ban-1"

    u = update_user(state, "u2", role_id="r1", assigned_branch_id=None)
    assert u.assigned_branch_id is None


def test_update_user_to_admin_drops_branch(state):
    u = update_user(state, "u3", role_id="r3")
    assert u.role == ADMIN
    assert u.assigned_branch_id is None


def test_delete_user_refuses_self(state):
    with pytest.raises(ValueError):
        delete_user(state, "u1", acting_user_id="u1")
    assert delete_user(state, "u3", acting_user_id="u1")
    assert state.user("u3") is None


def test_authenticate(state):
    assert authenticate(state, "Admin ", "admin123").id == "u1"
    assert authenticate(state, "admin", "wrong") is None
    assert authenticate(state, "ghost", "ghost123") is None

    create_user(state, username="nadia", full_name="Nadia", role_id="r2", password="s3cret")
    assert authenticate(state, "nadia", "s3cret") is not None
    assert authenticate(state, "nadia", "nadia123") is None


def test_roles(state):
    role = add_role(state, name="Cashier", access_level="SELLER")
    assert role in state.staff_roles
    with pytest.raises(ValueError):
        add_role(state, name="Owner", access_level="ROOT")

    update_role(state, "r2", name="Sales Lead", access_level=MANAGER)
    assert state.user("u3").role == MANAGER

    with pytest.raises(ValueError):
        delete_role(state, "r1")
    assert delete_role(state, role.id)


def test_month_options():
    opts = month_options(date(2024, 2, 10), count=3)
    assert opts == ["February 2024", "January 2024", "December 2023"]


def test_process_salary_books_expense(state):
    pay = process_salary(state, "u3", "October 2023", bonus=2000, deduction=500)
    assert pay.amount == 23500
    assert pay.basic_salary == 22000
    assert pay.branch_id == "ut-1"
    assert state.salary_payments == [pay]

    expense = state.expenses[0]
    assert expense.category == "Salary"
    assert expense.amount == 23500
    assert expense.branch_id == "ut-1"
    assert is_paid_for_month(state, "u3", " october   2023 ")


def test_process_salary_once_per_month(state):
    process_salary(state, "u3", "October 2023")
    with pytest.raises(ValueError):
        process_salary(state, "u3", "OCTOBER 2023")
    assert len(state.expenses) == 1


def test_process_salary_admin_falls_back_to_first_branch(state):
    pay = process_salary(state, "u1", "October 2023")
    assert pay.branch_id == "wh"


def test_process_salary_rejects_bad_amounts(state):
    u = create_user(state, username="intern", full_name="Intern", role_id="r2", assigned_branch_id="ut-1")
    with pytest.raises(ValueError):
        process_salary(state, u.id, "October 2023")
    with pytest.raises(ValueError):
        process_salary(state, "u3", "October 2023", deduction=22000)
    assert state.expenses == []
    assert state.salary_payments == []
