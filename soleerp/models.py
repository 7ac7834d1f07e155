from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

SALE = "SALE"
RETURN = "RETURN"

ADMIN = "ADMIN"
MANAGER = "MANAGER"
SELLER = "SELLER"
ACCESS_LEVELS = (ADMIN, MANAGER, SELLER)

EXPENSE_CATEGORIES = (
    "Conveyance",
    "Rent",
    "Electricity",
    "Snacks",
    "Utility",
    "Salary",
    "Miscellaneous",
)


def _from_dict(cls, data: dict):
    # Unknown keys are ignored; missing required keys raise TypeError.
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in dict(data).items() if k in names})


@dataclass
class Product:
    id: str
    name: str
    brand: str
    category: str
    size: str
    color: str
    cost_price: float
    selling_price: float
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return _from_dict(cls, data)


@dataclass
class Branch:
    id: str
    name: str
    location: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Branch":
        return _from_dict(cls, data)


@dataclass
class StockItem:
    id: str
    product_id: str
    branch_id: str
    quantity: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StockItem":
        return _from_dict(cls, data)


@dataclass
class SaleItem:
    product_id: str
    quantity: int
    unit_price: float
    cost_price: float

    @property
    def line_total(self) -> float:
        return float(self.unit_price) * int(self.quantity)

    @property
    def line_cost(self) -> float:
        return float(self.cost_price) * int(self.quantity)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return _from_dict(cls, data)


@dataclass
class SaleRecord:
    """
    A checkout (type SALE) or a refund of one (type RETURN).

    RETURN records point back at the sale they refund through original_sale_id
    and carry the same items with a negated final_amount.
    """

    id: str
    branch_id: str
    date: str
    items: list[SaleItem]
    total_amount: float
    vat: float
    discount: float
    final_amount: float
    type: str = SALE
    is_returned: bool = False
    original_sale_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None

    @property
    def cost_of_goods(self) -> float:
        return sum(i.line_cost for i in self.items)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        data = dict(data)
        data["items"] = [SaleItem.from_dict(i) for i in data.get("items") or []]
        return _from_dict(cls, data)


@dataclass
class Expense:
    id: str
    branch_id: str
    category: str
    description: str
    amount: float
    date: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        return _from_dict(cls, data)


@dataclass
class StaffRole:
    id: str
    name: str
    access_level: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StaffRole":
        return _from_dict(cls, data)


@dataclass
class User:
    id: str
    username: str
    role: str
    full_name: str
    base_salary: float = 0.0
    joining_date: str = ""
    status: str = "ACTIVE"
    password: Optional[str] = None
    role_id: Optional[str] = None
    assigned_branch_id: Optional[str] = None
    phone_number: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return _from_dict(cls, data)


@dataclass
class SalaryPayment:
    id: str
    user_id: str
    branch_id: str
    basic_salary: float
    amount: float
    month: str
    date_paid: str
    bonus: float = 0.0
    deduction: float = 0.0
    note: Optional[str] = None
    status: str = "Paid"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SalaryPayment":
        return _from_dict(cls, data)


@dataclass
class Category:
    id: str
    name: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return _from_dict(cls, data)


@dataclass
class AppState:
    """Everything the application knows, held in memory by the controller."""

    users: list[User] = field(default_factory=list)
    staff_roles: list[StaffRole] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    stock: list[StockItem] = field(default_factory=list)
    sales: list[SaleRecord] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    salary_payments: list[SalaryPayment] = field(default_factory=list)
    branches: list[Branch] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    vat_rate: float = 5.0
    app_name: str = "SoleERP"
    logo_url: str = ""
    selected_branch_id: str = ""
    is_authenticated: bool = False
    current_user: Optional[User] = None

    def product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def branch(self, branch_id: str) -> Optional[Branch]:
        return next((b for b in self.branches if b.id == branch_id), None)

    def sale(self, sale_id: str) -> Optional[SaleRecord]:
        return next((s for s in self.sales if s.id == sale_id), None)

    def user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def product_name(self, product_id: str) -> str:
        p = self.product(product_id)
        return p.name if p else "Unknown"

    def branch_name(self, branch_id: Optional[str]) -> str:
        b = self.branch(branch_id) if branch_id else None
        return b.name if b else "N/A"
