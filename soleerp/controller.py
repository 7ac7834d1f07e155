from __future__ import annotations

import logging
from typing import Any, Optional

from soleerp.db import wipe_all
from soleerp.models import AppState, Branch, Category, Expense, Product, SalaryPayment, SaleRecord, StaffRole, User
from soleerp.repository import DATA_FIELDS, StateRepository
from soleerp.services import branches, expenses, inventory, ledger, sales, staff
from soleerp.services.access import Capability, can
from soleerp.services.demo_data import default_state, load_demo_activity

logger = logging.getLogger(__name__)


class AccessDenied(PermissionError):
    pass


class AppController:
    """
    Owns the application state and is the only thing that mutates it.

    Each public method is one user action: it checks the acting user's
    capability, calls into the services, then writes back the data entries
    that action touched.

    One controller lives per browser session. Login, current user and the
    selected branch belong to that session only and are never written to the
    store; the catalogue and ledger data is shared through the store and
    re-read by `refresh`.
    """

    def __init__(self, repo: StateRepository, state: Optional[AppState] = None):
        self.repo = repo
        self.state = state if state is not None else repo.load()

    def _persist(self, *attrs: str) -> None:
        self.repo.save(self.state, attrs)

    def _require(self, capability: Capability) -> None:
        if not can(self.state.current_user, capability):
            raise AccessDenied("You do not have the necessary permissions for this action.")

    def _log_result(self, action: str, result: ledger.LedgerResult, **ctx: Any) -> None:
        details = " ".join(f"{k}={v}" for k, v in ctx.items())
        if result.applied:
            logger.info("%s applied %s", action, details)
        else:
            logger.warning("%s skipped (%s) %s", action, result.reason, details)

    # ---- session ----

    def login(self, username: str, password: str) -> Optional[User]:
        user = staff.authenticate(self.state, username, password)
        if user is None:
            logger.info("Failed login for %r", username)
            return None
        self.state.is_authenticated = True
        self.state.current_user = user
        if not can(user, Capability.ALL_BRANCHES) and user.assigned_branch_id:
            self.state.selected_branch_id = user.assigned_branch_id
        logger.info("User %s logged in", user.username)
        return user

    def logout(self) -> None:
        self.state.is_authenticated = False
        self.state.current_user = None

    def select_branch(self, branch_id: str) -> None:
        if self.state.branch(branch_id) is None:
            raise ValueError("Branch not found.")
        self.state.selected_branch_id = branch_id

    # ---- stock ledger ----

    def checkout(self, cart: list[sales.CartLine], *, branch_id: str, discount_percent: float = 0.0, **customer: Any) -> SaleRecord:
        self._require(Capability.USE_POS)
        sale = sales.checkout(self.state, cart, branch_id=branch_id, discount_percent=discount_percent, **customer)
        self._persist("sales", "stock")
        logger.info("Sale %s at %s final=%.2f", sale.id, sale.branch_id, sale.final_amount)
        return sale

    def add_stock(self, product_id: str, branch_id: str, quantity: int) -> ledger.LedgerResult:
        self._require(Capability.MANAGE_INVENTORY)
        result = ledger.apply_purchase_entry(self.state, product_id, branch_id, quantity)
        self._log_result("Purchase entry", result, product=product_id, branch=branch_id, qty=quantity)
        if result.applied:
            self._persist("stock")
        return result

    def transfer_stock(self, product_id: str, from_branch_id: str, to_branch_id: str, quantity: int) -> ledger.LedgerResult:
        self._require(Capability.MANAGE_INVENTORY)
        if from_branch_id == to_branch_id:
            raise ValueError("Source and destination branch must differ.")
        result = ledger.apply_transfer(self.state, product_id, from_branch_id, to_branch_id, quantity)
        self._log_result("Transfer", result, product=product_id, src=from_branch_id, dst=to_branch_id, qty=quantity)
        if result.applied:
            self._persist("stock")
        return result

    def process_return(self, sale_id: str) -> ledger.LedgerResult:
        self._require(Capability.PROCESS_RETURNS)
        result = ledger.apply_return(self.state, sale_id)
        self._log_result("Return", result, sale=sale_id)
        if result.applied:
            self._persist("sales", "stock")
        return result

    def delete_sale(self, sale_id: str) -> ledger.LedgerResult:
        self._require(Capability.DELETE_TRANSACTIONS)
        result = ledger.delete_transaction(self.state, sale_id)
        self._log_result("Delete transaction", result, sale=sale_id)
        if result.applied:
            self._persist("sales", "stock")
        return result

    # ---- catalogue ----

    def register_product(self, **fields: Any) -> Product:
        self._require(Capability.MANAGE_INVENTORY)
        product = inventory.register_product(self.state, **fields)
        self._persist("products", "stock")
        return product

    def update_product(self, product_id: str, **changes: Any) -> Product:
        self._require(Capability.MANAGE_INVENTORY)
        product = inventory.update_product(self.state, product_id, **changes)
        self._persist("products")
        return product

    def delete_product(self, product_id: str) -> bool:
        self._require(Capability.MANAGE_INVENTORY)
        removed = inventory.delete_product(self.state, product_id)
        if removed:
            self._persist("products", "stock")
            logger.info("Product %s deleted with its stock", product_id)
        return removed

    # ---- branches / categories / settings ----

    def add_branch(self, *, name: str, location: str = "") -> Branch:
        self._require(Capability.MANAGE_BRANCHES)
        branch = branches.add_branch(self.state, name=name, location=location)
        self._persist("branches")
        return branch

    def update_branch(self, branch_id: str, *, name: str, location: str = "") -> Branch:
        self._require(Capability.MANAGE_BRANCHES)
        branch = branches.update_branch(self.state, branch_id, name=name, location=location)
        self._persist("branches")
        return branch

    def delete_branch(self, branch_id: str) -> bool:
        self._require(Capability.MANAGE_BRANCHES)
        removed = branches.delete_branch(self.state, branch_id)
        if removed:
            self._persist("branches", "stock")
        return removed

    def add_category(self, name: str) -> Category:
        self._require(Capability.MANAGE_SETTINGS)
        category = branches.add_category(self.state, name)
        self._persist("categories")
        return category

    def rename_category(self, category_id: str, new_name: str) -> Category:
        self._require(Capability.MANAGE_SETTINGS)
        category = branches.rename_category(self.state, category_id, new_name)
        self._persist("categories", "products")
        return category

    def delete_category(self, category_id: str) -> bool:
        self._require(Capability.MANAGE_SETTINGS)
        removed = branches.delete_category(self.state, category_id)
        if removed:
            self._persist("categories")
        return removed

    def update_settings(self, *, vat_rate: Optional[float] = None, app_name: Optional[str] = None, logo_url: Optional[str] = None) -> None:
        self._require(Capability.MANAGE_SETTINGS)
        changed = []
        if vat_rate is not None:
            if float(vat_rate) < 0 or float(vat_rate) > 100:
                raise ValueError("VAT rate must be between 0 and 100.")
            self.state.vat_rate = float(vat_rate)
            changed.append("vat_rate")
        if app_name is not None:
            self.state.app_name = app_name.strip() or "SoleERP"
            changed.append("app_name")
        if logo_url is not None:
            self.state.logo_url = logo_url.strip()
            changed.append("logo_url")
        self._persist(*changed)

    # ---- expenses ----

    def add_expense(self, **fields: Any) -> Expense:
        self._require(Capability.MANAGE_EXPENSES)
        expense = expenses.add_expense(self.state, **fields)
        self._persist("expenses")
        return expense

    def delete_expense(self, expense_id: str) -> bool:
        self._require(Capability.MANAGE_EXPENSES)
        removed = expenses.delete_expense(self.state, expense_id)
        if removed:
            self._persist("expenses")
        return removed

    # ---- staff ----

    def create_user(self, **fields: Any) -> User:
        self._require(Capability.MANAGE_STAFF)
        user = staff.create_user(self.state, **fields)
        self._persist("users")
        logger.info("User %s created", user.username)
        return user

    def update_user(self, user_id: str, **fields: Any) -> User:
        self._require(Capability.MANAGE_STAFF)
        user = staff.update_user(self.state, user_id, **fields)
        self._persist("users")
        return user

    def delete_user(self, user_id: str) -> bool:
        self._require(Capability.MANAGE_STAFF)
        acting = self.state.current_user.id if self.state.current_user else None
        removed = staff.delete_user(self.state, user_id, acting_user_id=acting)
        if removed:
            self._persist("users")
        return removed

    def add_role(self, *, name: str, access_level: str) -> StaffRole:
        self._require(Capability.MANAGE_SETTINGS)
        role = staff.add_role(self.state, name=name, access_level=access_level)
        self._persist("staff_roles")
        return role

    def update_role(self, role_id: str, *, name: str, access_level: str) -> StaffRole:
        self._require(Capability.MANAGE_SETTINGS)
        role = staff.update_role(self.state, role_id, name=name, access_level=access_level)
        self._persist("staff_roles", "users")
        return role

    def delete_role(self, role_id: str) -> bool:
        self._require(Capability.MANAGE_SETTINGS)
        removed = staff.delete_role(self.state, role_id)
        if removed:
            self._persist("staff_roles")
        return removed

    def process_salary(self, user_id: str, month: str, **kwargs: Any) -> SalaryPayment:
        self._require(Capability.MANAGE_STAFF)
        payment = staff.process_salary(self.state, user_id, month, **kwargs)
        self._persist("salary_payments", "expenses")
        logger.info("Salary %s paid to %s for %s: %.2f", payment.id, user_id, month, payment.amount)
        return payment

    # ---- data management ----

    def refresh(self) -> None:
        """
        Re-read the shared data written by other sessions. The session keeps
        its login unless the user was removed; a vanished branch selection
        falls back to the first branch.
        """
        fresh = self.repo.load()
        for attr in DATA_FIELDS:
            setattr(self.state, attr, getattr(fresh, attr))

        user = self.state.current_user
        if user is not None:
            self.state.current_user = self.state.user(user.id)
            if self.state.current_user is None:
                logger.info("User %s no longer exists, session closed", user.username)
                self.state.is_authenticated = False
        if self.state.branch(self.state.selected_branch_id) is None:
            self.state.selected_branch_id = self.state.branches[0].id if self.state.branches else ""

    def reset_to_defaults(self) -> None:
        """Replace all data with the default dataset, keeping the session."""
        self._require(Capability.MANAGE_SETTINGS)
        user, authed, branch = self.state.current_user, self.state.is_authenticated, self.state.selected_branch_id
        self.state = default_state()
        self.state.current_user, self.state.is_authenticated = user, authed
        if self.state.branch(branch) is not None:
            self.state.selected_branch_id = branch
        wipe_all(self.repo.conn)
        self.repo.save_all(self.state)
        logger.info("State reset to defaults")

    def load_demo_activity(self, *, seed: int = 7) -> int:
        self._require(Capability.MANAGE_SETTINGS)
        n = load_demo_activity(self.state, seed=seed)
        self._persist("sales", "stock")
        return n
