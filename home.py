from __future__ import annotations

import streamlit as st

from soleerp.config import get_settings
from soleerp.services.access import Capability, can
from soleerp.ui import get_controller

st.set_page_config(page_title="SoleERP", page_icon="👟", layout="wide")

settings = get_settings()
ctrl = get_controller()
state = ctrl.state

st.title(f"👟 {state.app_name}")
st.caption("Multi-branch shoe retail: inventory, point of sale, returns, expenses, payroll and financials.")

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

user = state.current_user if state.is_authenticated else None

if user is None:
    st.subheader("Log in")
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")
    if submitted:
        if ctrl.login(username, password):
            st.rerun()
        else:
            st.error("Invalid credentials. Check username or contact Admin.")
    st.stop()

st.write(f"Logged in as **{user.full_name}** ({user.role})")

if can(user, Capability.ALL_BRANCHES):
    names = [b.name for b in state.branches]
    current = state.branch_name(state.selected_branch_id)
    choice = st.selectbox("Active branch", options=names, index=names.index(current) if current in names else 0)
    branch_id = next(b.id for b in state.branches if b.name == choice)
    if branch_id != state.selected_branch_id:
        ctrl.select_branch(branch_id)
        st.rerun()
else:
    st.write(f"**Branch:** {state.branch_name(user.assigned_branch_id)}")

if st.button("Log out"):
    ctrl.logout()
    st.rerun()

st.info("Use the left sidebar navigation to move between modules.", icon="ℹ️")
