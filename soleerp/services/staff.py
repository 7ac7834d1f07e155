from __future__ import annotations

from datetime import date
from typing import Any, Optional

from soleerp.models import ACCESS_LEVELS, ADMIN, AppState, SalaryPayment, StaffRole, User
from soleerp.services.expenses import add_expense
from soleerp.utils import iso_now, iso_today, month_label, new_id, normalize_month

FALLBACK_BRANCH_ID = "wh"

# update_user default for "leave the assigned branch as it is"
KEEP = object()


class DuplicateUsernameError(ValueError):
    pass


def _normalize_username(username: str) -> str:
    u = str(username or "").strip().lower()
    if not u:
        raise ValueError("Username is required.")
    return u


def _get_role(state: AppState, role_id: str) -> StaffRole:
    role = next((r for r in state.staff_roles if r.id == role_id), None)
    if role is None:
        raise ValueError("Please select a valid job role.")
    return role


def _check_unique(state: AppState, username: str, exclude_id: Optional[str] = None) -> None:
    if any(u.username == username and u.id != exclude_id for u in state.users):
        raise DuplicateUsernameError("Username already taken.")


def default_password(username: str) -> str:
    return f"{username}123"


def create_user(
    state: AppState,
    *,
    username: str,
    full_name: str,
    role_id: str,
    password: Optional[str] = None,
    assigned_branch_id: Optional[str] = None,
    phone_number: Optional[str] = None,
    base_salary: float = 0.0,
    joining_date: Optional[str] = None,
    status: str = "ACTIVE",
) -> User:
    username = _normalize_username(username)
    _check_unique(state, username)
    role = _get_role(state, role_id)
    if status not in ("ACTIVE", "INACTIVE"):
        raise ValueError("Status must be ACTIVE or INACTIVE.")
    if float(base_salary) < 0:
        raise ValueError("Base salary must be >= 0.")

    user = User(
        id=new_id("U"),
        username=username,
        password=password or default_password(username),
        role=role.access_level,
        role_id=role.id,
        assigned_branch_id=None if role.access_level == ADMIN else assigned_branch_id,
        full_name=str(full_name or "").strip() or username,
        phone_number=phone_number or None,
        base_salary=float(base_salary),
        joining_date=joining_date or iso_today(),
        status=status,
    )
    state.users.append(user)
    return user


def update_user(
    state: AppState,
    user_id: str,
    *,
    role_id: str,
    username: Optional[str] = None,
    full_name: Optional[str] = None,
    password: Optional[str] = None,
    assigned_branch_id: Any = KEEP,
    phone_number: Optional[str] = None,
    base_salary: Optional[float] = None,
    joining_date: Optional[str] = None,
    status: Optional[str] = None,
) -> User:
    """
    Edit a user. Fields left as None keep their current value; the assigned
    branch is kept unless passed (None unassigns). Admins never keep one.
    """
    user = state.user(user_id)
    if user is None:
        raise ValueError("User not found.")
    if username is not None:
        username = _normalize_username(username)
        _check_unique(state, username, exclude_id=user.id)
    role = _get_role(state, role_id)

    if username is not None:
        user.username = username
    if full_name:
        user.full_name = full_name.strip()
    if password:
        user.password = password
    if phone_number:
        user.phone_number = phone_number
    if status:
        user.status = status
    if base_salary is not None:
        user.base_salary = float(base_salary)
    if joining_date:
        user.joining_date = joining_date
    user.role = role.access_level
    user.role_id = role.id
    if role.access_level == ADMIN:
        user.assigned_branch_id = None
    elif assigned_branch_id is not KEEP:
        user.assigned_branch_id = assigned_branch_id
    return user


def delete_user(state: AppState, user_id: str, *, acting_user_id: Optional[str]) -> bool:
    if user_id == acting_user_id:
        raise ValueError("You cannot delete your own account.")
    before = len(state.users)
    state.users = [u for u in state.users if u.id != user_id]
    return len(state.users) != before


def add_role(state: AppState, *, name: str, access_level: str) -> StaffRole:
    if access_level not in ACCESS_LEVELS:
        raise ValueError(f"Access level must be one of: {', '.join(ACCESS_LEVELS)}.")
    name = str(name or "").strip()
    if not name:
        raise ValueError("Role name is required.")
    role = StaffRole(id=new_id("ROLE"), name=name, access_level=access_level)
    state.staff_roles.append(role)
    return role


def update_role(state: AppState, role_id: str, *, name: str, access_level: str) -> StaffRole:
    role = _get_role(state, role_id)
    if access_level not in ACCESS_LEVELS:
        raise ValueError(f"Access level must be one of: {', '.join(ACCESS_LEVELS)}.")
    role.name = str(name or "").strip() or role.name
    role.access_level = access_level
    # Keep the users' cached access level in step with their role.
    for u in state.users:
        if u.role_id == role.id:
            u.role = access_level
            if access_level == ADMIN:
                u.assigned_branch_id = None
    return role


def delete_role(state: AppState, role_id: str) -> bool:
    if any(u.role_id == role_id for u in state.users):
        raise ValueError("Cannot delete role: employees are currently assigned to it. Reassign them first.")
    before = len(state.staff_roles)
    state.staff_roles = [r for r in state.staff_roles if r.id != role_id]
    return len(state.staff_roles) != before


def authenticate(state: AppState, username: str, password: str) -> Optional[User]:
    """
    Toy login: the user's stored password, or `<username>123` when none is set.
    """
    name = str(username or "").strip().lower()
    user = next((u for u in state.users if u.username == name), None)
    if user is None:
        return None
    expected = user.password or default_password(user.username)
    return user if password == expected else None


def is_paid_for_month(state: AppState, user_id: str, month: str) -> bool:
    target = normalize_month(month)
    return any(p.user_id == user_id and normalize_month(p.month) == target for p in state.salary_payments)


def month_options(today: Optional[date] = None, count: int = 12) -> list[str]:
    today = today or date.today()
    out = []
    y, m = today.year, today.month
    for _ in range(count):
        out.append(month_label(date(y, m, 1)))
        m -= 1
        if m == 0:
            y, m = y - 1, 12
    return out


def process_salary(
    state: AppState,
    user_id: str,
    month: str,
    *,
    bonus: float = 0.0,
    deduction: float = 0.0,
    note: Optional[str] = None,
) -> SalaryPayment:
    """
    Pay one employee for one month.

    The payout is booked twice: as a SalaryPayment (payroll history) and as a
    Salary expense at the employee's branch (financial reports).
    """
    user = state.user(user_id)
    if user is None:
        raise ValueError("User not found.")

    basic = float(user.base_salary or 0)
    if basic <= 0:
        raise ValueError(f"Cannot process payment: {user.full_name} has no base salary. Update the profile first.")
    if is_paid_for_month(state, user.id, month):
        raise ValueError(f"Payroll for {user.full_name} has already been recorded for {month}.")

    net = basic + float(bonus) - float(deduction)
    if net <= 0:
        raise ValueError("Net salary must be > 0.")

    branch_id = user.assigned_branch_id or (state.branches[0].id if state.branches else FALLBACK_BRANCH_ID)
    add_expense(
        state,
        branch_id=branch_id,
        category="Salary",
        description=f"Payroll Disbursed: {user.full_name} for {month}",
        amount=net,
        date=iso_now(),
    )

    payment = SalaryPayment(
        id=new_id("SAL"),
        user_id=user.id,
        branch_id=branch_id,
        basic_salary=basic,
        bonus=float(bonus),
        deduction=float(deduction),
        amount=net,
        month=month,
        date_paid=iso_now(),
        note=note or None,
    )
    state.salary_payments.append(payment)
    return payment
