from __future__ import annotations

from soleerp.models import AppState, Branch, Category
from soleerp.utils import new_id


def _required(value: str, label: str) -> str:
    s = str(value or "").strip()
    if not s:
        raise ValueError(f"{label} is required.")
    return s


def add_branch(state: AppState, *, name: str, location: str = "") -> Branch:
    branch = Branch(id=new_id("SR"), name=_required(name, "Branch name"), location=str(location or "").strip())
    state.branches.append(branch)
    return branch


def update_branch(state: AppState, branch_id: str, *, name: str, location: str = "") -> Branch:
    branch = state.branch(branch_id)
    if branch is None:
        raise ValueError("Branch not found.")
    branch.name = _required(name, "Branch name")
    branch.location = str(location or "").strip()
    return branch


def delete_branch(state: AppState, branch_id: str) -> bool:
    """Remove the branch together with all stock it holds."""
    if state.branch(branch_id) is None:
        return False
    state.branches = [b for b in state.branches if b.id != branch_id]
    state.stock = [s for s in state.stock if s.branch_id != branch_id]
    if state.selected_branch_id == branch_id:
        state.selected_branch_id = state.branches[0].id if state.branches else ""
    return True


def add_category(state: AppState, name: str) -> Category:
    name = _required(name, "Category name")
    if any(c.name.lower() == name.lower() for c in state.categories):
        raise ValueError("Category already exists.")
    category = Category(id=new_id("CAT"), name=name)
    state.categories.append(category)
    return category


def rename_category(state: AppState, category_id: str, new_name: str) -> Category:
    category = next((c for c in state.categories if c.id == category_id), None)
    if category is None:
        raise ValueError("Category not found.")
    new_name = _required(new_name, "Category name")

    old_name = category.name
    category.name = new_name
    for p in state.products:
        if p.category == old_name:
            p.category = new_name
    return category


def delete_category(state: AppState, category_id: str) -> bool:
    before = len(state.categories)
    state.categories = [c for c in state.categories if c.id != category_id]
    return len(state.categories) != before
