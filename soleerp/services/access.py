from __future__ import annotations

from enum import Enum
from typing import Optional

from soleerp.models import ADMIN, MANAGER, SELLER, AppState, User


class Capability(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_INVENTORY = "view_inventory"
    MANAGE_INVENTORY = "manage_inventory"
    USE_POS = "use_pos"
    PROCESS_RETURNS = "process_returns"
    MANAGE_EXPENSES = "manage_expenses"
    VIEW_REPORTS = "view_reports"
    DELETE_TRANSACTIONS = "delete_transactions"
    MANAGE_STAFF = "manage_staff"
    MANAGE_BRANCHES = "manage_branches"
    MANAGE_SETTINGS = "manage_settings"
    ALL_BRANCHES = "all_branches"


_SELLER = frozenset(
    {
        Capability.VIEW_INVENTORY,
        Capability.USE_POS,
        Capability.PROCESS_RETURNS,
    }
)

_MANAGER = _SELLER | {
    Capability.VIEW_DASHBOARD,
    Capability.MANAGE_INVENTORY,
    Capability.MANAGE_EXPENSES,
    Capability.VIEW_REPORTS,
}

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    ADMIN: frozenset(Capability),
    MANAGER: frozenset(_MANAGER),
    SELLER: _SELLER,
}


def capabilities(user: Optional[User]) -> frozenset[Capability]:
    if user is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(user.role, frozenset())


def can(user: Optional[User], capability: Capability) -> bool:
    return capability in capabilities(user)


def branch_scope(state: AppState, user: Optional[User]) -> list[str]:
    """Branch ids whose data the user may see."""
    if can(user, Capability.ALL_BRANCHES):
        return [b.id for b in state.branches]
    if user is not None and user.assigned_branch_id:
        return [user.assigned_branch_id]
    return []


def effective_branch(state: AppState, user: Optional[User]) -> str:
    """The branch the POS sells from: pinned for staff, selectable for admins."""
    if user is not None and not can(user, Capability.ALL_BRANCHES) and user.assigned_branch_id:
        return user.assigned_branch_id
    if state.branch(state.selected_branch_id) is not None:
        return state.selected_branch_id
    return state.branches[0].id if state.branches else ""
