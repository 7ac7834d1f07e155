from __future__ import annotations

import logging

import streamlit as st

from soleerp.config import log_level
from soleerp.services.access import Capability, can
from soleerp.ui import get_controller

logging.basicConfig(
    level=log_level(),
    format="%(asctime)s | %(levelname)s | %(message)s",
)

st.set_page_config(page_title="SoleERP", page_icon="👟", layout="wide")

ctrl = get_controller()

user = ctrl.state.current_user if ctrl.state.is_authenticated else None

pages = [st.Page("home.py", title="Home", icon="🏠")]
if user is not None:
    if can(user, Capability.VIEW_DASHBOARD):
        pages.append(st.Page("pages/1_📊_Dashboard.py", title="Dashboard", icon="📊"))
    pages += [
        st.Page("pages/2_📦_Inventory.py", title="Inventory / Stock", icon="📦"),
        st.Page("pages/3_🛒_POS.py", title="Sell (POS)", icon="🛒"),
        st.Page("pages/4_↩️_Returns.py", title="Returns", icon="↩️"),
    ]
    if can(user, Capability.MANAGE_EXPENSES):
        pages.append(st.Page("pages/5_💸_Expenses.py", title="Expenses", icon="💸"))
    if can(user, Capability.VIEW_REPORTS):
        pages.append(st.Page("pages/6_📈_Reports.py", title="Financials", icon="📈"))
    if can(user, Capability.MANAGE_STAFF):
        pages.append(st.Page("pages/7_👥_Staff.py", title="Staff & Payroll", icon="👥"))
    if can(user, Capability.MANAGE_SETTINGS):
        pages.append(st.Page("pages/8_⚙️_Settings.py", title="Admin Settings", icon="⚙️"))
        pages.append(st.Page("pages/9_🧪_Data_Management.py", title="Data Management", icon="🧪"))

st.navigation(pages).run()
