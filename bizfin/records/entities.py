"""
Entity Definitions Module

Field tables for every record type tracked by the application: which fields
are required, which are numeric and their bounds, which hold dates or enum
choices, how lists are searched and ordered.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


EXPENSE_CATEGORIES = (
    "office_supplies",
    "utilities",
    "rent",
    "marketing",
    "travel",
    "meals",
    "equipment",
    "software",
    "insurance",
    "other",
)
LIABILITY_TYPES = ("loan", "credit_card", "vendor_payment", "tax_payment", "other")
SALARY_STATUSES = ("paid", "unpaid", "pending")
CASHFLOW_TYPES = ("inflow", "outflow")
PDC_STATUSES = ("pending", "cleared", "bounced", "cancelled")
CAPITAL_TYPES = ("equity", "loan", "investment", "grant", "other")

MIN_AMOUNT = Decimal("0.01")
# Largest value a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")


@dataclass
class NumericRule:
    """Bounds for a numeric field. Bounds are inclusive."""

    minimum: Decimal | None = None
    maximum: Decimal | None = None
    integer: bool = False
    places: int | None = None  # most decimal places allowed


AMOUNT_RULE = NumericRule(minimum=MIN_AMOUNT, maximum=MAX_AMOUNT, places=2)


@dataclass
class RelatedTable:
    """A table joined into list results as a nested object."""

    table: str
    alias: str
    foreign_key: str
    columns: tuple[str, ...]
    key: str  # name of the nested object in each row


@dataclass
class EntitySpec:
    """Describes one record type and its storage table."""

    name: str
    label: str
    table: str
    alias: str
    columns: tuple[str, ...]
    required: tuple[str, ...] = ()
    choices: dict[str, tuple[str, ...]] = field(default_factory=dict)
    numeric: dict[str, NumericRule] = field(default_factory=dict)
    dates: tuple[str, ...] = ()
    booleans: tuple[str, ...] = ()
    defaults: dict[str, Any] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    search_columns: tuple[str, ...] = ()
    ordering: tuple[tuple[str, str], ...] = (("created_at", "DESC"),)
    immutable: tuple[str, ...] = ()
    related: RelatedTable | None = None

    def field_label(self, column: str) -> str:
        """Human readable name used in validation messages."""
        if column in self.labels:
            return self.labels[column]
        return column.replace("_", " ").title()

    @property
    def updatable_columns(self) -> tuple[str, ...]:
        return tuple(c for c in self.columns if c not in self.immutable)

    @property
    def text_columns(self) -> tuple[str, ...]:
        typed = set(self.numeric) | set(self.dates) | set(self.booleans)
        return tuple(c for c in self.columns if c not in typed)

    @property
    def filterable_columns(self) -> tuple[str, ...]:
        return ("id",) + self.columns + ("created_at", "updated_at")


EXPENSE = EntitySpec(
    name="expense",
    label="Expense",
    table="expenses",
    alias="ex",
    columns=("category", "amount", "date", "notes"),
    required=("category", "amount", "date"),
    choices={"category": EXPENSE_CATEGORIES},
    numeric={"amount": AMOUNT_RULE},
    dates=("date",),
    search_columns=("notes", "category"),
    ordering=(("date", "DESC"),),
)

LIABILITY = EntitySpec(
    name="liability",
    label="Liability",
    table="liabilities",
    alias="li",
    columns=("type", "name", "amount", "outstanding_amount", "due_date", "interest_rate", "notes"),
    required=("type", "name", "amount", "outstanding_amount"),
    choices={"type": LIABILITY_TYPES},
    numeric={
        "amount": AMOUNT_RULE,
        "outstanding_amount": NumericRule(minimum=Decimal("0"), maximum=MAX_AMOUNT, places=2),
        "interest_rate": NumericRule(minimum=Decimal("0"), maximum=Decimal("100"), places=2),
    },
    dates=("due_date",),
    search_columns=("name", "notes"),
    ordering=(("created_at", "DESC"),),
)

EMPLOYEE = EntitySpec(
    name="employee",
    label="Employee",
    table="employees",
    alias="em",
    columns=("name", "position", "monthly_salary", "hire_date", "is_active"),
    required=("name", "monthly_salary"),
    numeric={"monthly_salary": AMOUNT_RULE},
    dates=("hire_date",),
    booleans=("is_active",),
    defaults={"is_active": True},
    labels={"is_active": "Active"},
    search_columns=("name", "position"),
    ordering=(("name", "ASC"),),
)

SALARY = EntitySpec(
    name="salary",
    label="Salary record",
    table="salaries",
    alias="sa",
    columns=("employee_id", "month", "year", "amount", "status", "paid_date", "notes"),
    required=("employee_id", "month", "year", "amount"),
    choices={"status": SALARY_STATUSES},
    numeric={
        "month": NumericRule(minimum=Decimal("1"), maximum=Decimal("12"), integer=True),
        "year": NumericRule(minimum=Decimal("2000"), maximum=Decimal("2100"), integer=True),
        "amount": AMOUNT_RULE,
    },
    dates=("paid_date",),
    defaults={"status": "unpaid"},
    labels={"employee_id": "Employee"},
    ordering=(("year", "DESC"), ("month", "DESC")),
    immutable=("employee_id",),
    related=RelatedTable(
        table="employees",
        alias="em",
        foreign_key="employee_id",
        columns=("name", "position"),
        key="employees",
    ),
)

CASHFLOW = EntitySpec(
    name="cashflow",
    label="Cashflow entry",
    table="cashflow",
    alias="cf",
    columns=("type", "category", "amount", "date", "description", "reference_id", "reference_type"),
    required=("type", "category", "amount", "date"),
    choices={"type": CASHFLOW_TYPES},
    numeric={"amount": AMOUNT_RULE},
    dates=("date",),
    search_columns=("category", "description"),
    ordering=(("date", "DESC"),),
)

PDC = EntitySpec(
    name="pdc",
    label="PDC",
    table="bank_pdc",
    alias="pd",
    columns=(
        "cheque_number",
        "bank_name",
        "amount",
        "issue_date",
        "due_date",
        "status",
        "payee",
        "purpose",
        "notes",
    ),
    required=("cheque_number", "bank_name", "amount", "issue_date", "due_date"),
    choices={"status": PDC_STATUSES},
    numeric={"amount": AMOUNT_RULE},
    dates=("issue_date", "due_date"),
    defaults={"status": "pending"},
    search_columns=("cheque_number", "payee", "purpose"),
    ordering=(("due_date", "ASC"),),
)

CAPITAL_INJECTION = EntitySpec(
    name="capital_injection",
    label="Capital injection record",
    table="capital_injections",
    alias="ci",
    columns=("type", "amount", "date", "source", "description", "notes"),
    required=("type", "amount", "date"),
    choices={"type": CAPITAL_TYPES},
    numeric={"amount": AMOUNT_RULE},
    dates=("date",),
    search_columns=("source", "description"),
    ordering=(("date", "DESC"),),
)

PROFILE = EntitySpec(
    name="profile",
    label="Profile",
    table="profiles",
    alias="pr",
    columns=("full_name", "company_name"),
)

ENTITIES: dict[str, EntitySpec] = {
    spec.name: spec
    for spec in (EXPENSE, LIABILITY, EMPLOYEE, SALARY, CASHFLOW, PDC, CAPITAL_INJECTION)
}
