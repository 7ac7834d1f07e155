from __future__ import annotations

import streamlit as st

from soleerp.config import get_settings
from soleerp.controller import AppController
from soleerp.db import get_conn
from soleerp.models import User
from soleerp.repository import StateRepository
from soleerp.services.access import Capability, can


SESSION_KEY = "soleerp_controller"


@st.cache_resource
def get_repository() -> StateRepository:
    return StateRepository(get_conn(get_settings().db_path))


def get_controller() -> AppController:
    """
    This browser session's controller. The store is shared, so every script
    run re-reads it to pick up changes made from other sessions.
    """
    ctrl = st.session_state.get(SESSION_KEY)
    if ctrl is None:
        ctrl = AppController(get_repository())
        st.session_state[SESSION_KEY] = ctrl
    else:
        ctrl.refresh()
    return ctrl


def require_user(ctrl: AppController, capability: Capability | None = None) -> User:
    """Stop the page unless someone is logged in (and allowed, if asked)."""
    user = ctrl.state.current_user
    if not ctrl.state.is_authenticated or user is None:
        st.warning("Please log in from the Home page.")
        st.stop()
    if capability is not None and not can(user, capability):
        st.error("Access denied. You do not have the necessary permissions to view this module.")
        st.stop()
    return user


def money_fmt(v: float) -> str:
    return f"{get_settings().currency} {float(v):,.2f}"


def branch_picker(ctrl: AppController, user: User, *, label: str = "Branch", key: str = "branch", include_all: bool = False) -> str | None:
    """Admins pick any branch (or All); everyone else is pinned to their own."""
    state = ctrl.state
    if not can(user, Capability.ALL_BRANCHES):
        st.write(f"**{label}:** {state.branch_name(user.assigned_branch_id)}")
        return user.assigned_branch_id

    names = (["All"] if include_all else []) + [b.name for b in state.branches]
    choice = st.selectbox(label, options=names, key=key)
    if choice == "All":
        return None
    return next(b.id for b in state.branches if b.name == choice)
