from __future__ import annotations

from soleerp.services.access import Capability, branch_scope, can, capabilities, effective_branch


def test_seller_capabilities(state):
    seller = state.user("u3")
    assert can(seller, Capability.USE_POS)
    assert can(seller, Capability.PROCESS_RETURNS)
    assert not can(seller, Capability.VIEW_REPORTS)
    assert not can(seller, Capability.DELETE_TRANSACTIONS)


def test_manager_is_branch_bound(state):
    manager = state.user("u2")
    assert can(manager, Capability.MANAGE_INVENTORY)
    assert can(manager, Capability.VIEW_REPORTS)
    assert not can(manager, Capability.MANAGE_STAFF)
    assert not can(manager, Capability.ALL_BRANCHES)
    assert branch_scope(state, manager) == ["ut-1"]


def test_admin_sees_everything(state):
    admin = state.user("u1")
    assert capabilities(admin) == frozenset(Capability)
    assert branch_scope(state, admin) == ["wh", "ut-1", "ban-1", "dhk-1"]


def test_anonymous_has_nothing(state):
    assert capabilities(None) == frozenset()
    assert branch_scope(state, None) == []


def test_effective_branch(state):
    state.selected_branch_id = "ban-1"
    assert effective_branch(state, state.user("u1")) == "ban-1"
    assert effective_branch(state, state.user("u3")) == "ut-1"

    state.selected_branch_id = "gone"
    assert effective_branch(state, state.user("u1")) == "wh"
