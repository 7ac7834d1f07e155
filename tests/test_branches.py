from __future__ import annotations

import pytest

from soleerp.services.branches import (
    add_branch,
    add_category,
    delete_branch,
    delete_category,
    rename_category,
    update_branch,
)


def test_add_and_update_branch(state):
    b = add_branch(state, name=" Gulshan ", location="Circle 1")
    assert b.id.startswith("SR-")
    assert b.name == "Gulshan"
    update_branch(state, b.id, name="Gulshan 2", location="")
    assert state.branch(b.id).name == "Gulshan 2"

    with pytest.raises(ValueError):
        add_branch(state, name="")
    with pytest.raises(ValueError):
        update_branch(state, "missing", name="x")


def test_delete_branch_drops_its_stock(state):
    assert delete_branch(state, "ut-1")
    assert state.branch("ut-1") is None
    assert not any(s.branch_id == "ut-1" for s in state.stock)
    assert len(state.stock) == 3
    assert state.selected_branch_id == "wh"


def test_delete_selected_branch_moves_selection(state):
    delete_branch(state, "wh")
    assert state.selected_branch_id == "ut-1"
    assert not delete_branch(state, "wh")


def test_category_names_are_unique(state):
    add_category(state, "Loafers")
    with pytest.raises(ValueError):
        add_category(state, "loafers")


def test_rename_category_updates_products(state):
    rename_category(state, "cat1", "Trainers")
    assert {p.id for p in state.products if p.category == "Trainers"} == {"p1", "p3", "p5"}
    assert not any(p.category == "Sneakers" for p in state.products)


def test_delete_category(state):
    assert delete_category(state, "cat5")
    assert not delete_category(state, "cat5")
    # products keep their category text
    assert delete_category(state, "cat4")
    assert state.product("p4").category == "Boots"
