"""
Payload Validation Module

Checks raw request payloads against the entity field tables and converts
accepted payloads into column values. Validation never raises: every problem
is collected so the caller can report them all at once.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .entities import (
    CAPITAL_INJECTION,
    CASHFLOW,
    EMPLOYEE,
    EXPENSE,
    LIABILITY,
    PDC,
    PROFILE,
    SALARY,
    EntitySpec,
    NumericRule,
)

TRUE_STRINGS = ("true", "1", "yes")
FALSE_STRINGS = ("false", "0", "no")


@dataclass
class ValidationError:
    """A single field problem."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of validating one payload."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]

    def add(self, error: ValidationError | None) -> None:
        if error is not None:
            self.errors.append(error)

    def to_list(self) -> list[dict]:
        return [error.to_dict() for error in self.errors]


def is_blank(value: Any) -> bool:
    """Return True for values treated as absent (None or empty string)."""
    return value is None or (isinstance(value, str) and not value.strip())


def _format_bound(bound: Decimal) -> str:
    return format(bound.normalize(), "f")


def _decimal_places(number: Decimal) -> int:
    return max(0, -number.normalize().as_tuple().exponent)


def parse_number(value: Any) -> Decimal | None:
    """Parse a JSON number or numeric string. Returns None if not numeric."""
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None

    return number


def parse_date(value: Any) -> date | None:
    """Parse an ISO calendar date (YYYY-MM-DD). Returns None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return None


def check_required(value: Any, field_name: str, label: str) -> ValidationError | None:
    if is_blank(value):
        return ValidationError(field_name, f"{label} is required")
    return None


def check_number(
    value: Any,
    field_name: str,
    label: str,
    rule: NumericRule,
) -> ValidationError | None:
    """Check that a value is numeric and within the rule's bounds.

    Args:
        value: Raw payload value
        field_name: Payload key
        label: Human readable field name
        rule: Numeric bounds

    Returns:
        ValidationError or None if the value is acceptable
    """
    number = parse_number(value)
    if number is None:
        return ValidationError(field_name, f"{label} must be a valid number")

    if rule.integer and number != number.to_integral_value():
        return ValidationError(field_name, f"{label} must be a whole number")

    if rule.minimum is not None and number < rule.minimum:
        return ValidationError(field_name, f"{label} must be at least {_format_bound(rule.minimum)}")

    if rule.maximum is not None and number > rule.maximum:
        return ValidationError(field_name, f"{label} must be at most {_format_bound(rule.maximum)}")

    if rule.places is not None and _decimal_places(number) > rule.places:
        return ValidationError(field_name, f"{label} must have at most {rule.places} decimal places")

    return None


def check_text(value: Any, field_name: str, label: str) -> ValidationError | None:
    if not isinstance(value, str):
        return ValidationError(field_name, f"{label} must be text")
    return None


def check_date(value: Any, field_name: str, label: str) -> ValidationError | None:
    if parse_date(value) is None:
        return ValidationError(field_name, f"{label} must be a valid date")
    return None


def check_choice(
    value: Any,
    field_name: str,
    label: str,
    choices: tuple[str, ...],
) -> ValidationError | None:
    if value not in choices:
        return ValidationError(field_name, f"{label} must be one of: {', '.join(choices)}")
    return None


def check_boolean(value: Any, field_name: str, label: str) -> ValidationError | None:
    if parse_bool(value) is None:
        return ValidationError(field_name, f"{label} must be true or false")
    return None


def validate_payload(
    spec: EntitySpec,
    data: Any,
    skip: tuple[str, ...] = (),
) -> ValidationResult:
    """Validate a raw payload against an entity's field table.

    Required fields are checked first, then text types, enum choices,
    numbers, dates and flags. Optional fields that are blank are not checked.

    Args:
        spec: Entity definition
        data: Decoded request body
        skip: Fields to leave out of validation entirely

    Returns:
        ValidationResult listing every problem found
    """
    result = ValidationResult()

    if not isinstance(data, Mapping):
        result.add(ValidationError("body", "Request body must be a JSON object"))
        return result

    for column in spec.required:
        if column in skip:
            continue
        result.add(check_required(data.get(column), column, spec.field_label(column)))

    for column in spec.text_columns:
        value = data.get(column)
        if column in skip or is_blank(value):
            continue
        result.add(check_text(value, column, spec.field_label(column)))

    for column, choices in spec.choices.items():
        value = data.get(column)
        if column in skip or is_blank(value) or not isinstance(value, str):
            continue
        result.add(check_choice(value, column, spec.field_label(column), choices))

    for column, rule in spec.numeric.items():
        value = data.get(column)
        if column in skip or is_blank(value):
            continue
        result.add(check_number(value, column, spec.field_label(column), rule))

    for column in spec.dates:
        value = data.get(column)
        if column in skip or is_blank(value):
            continue
        result.add(check_date(value, column, spec.field_label(column)))

    for column in spec.booleans:
        value = data.get(column)
        if column in skip or is_blank(value):
            continue
        result.add(check_boolean(value, column, spec.field_label(column)))

    return result


def normalize_payload(
    spec: EntitySpec,
    data: Mapping[str, Any],
    for_update: bool = False,
) -> dict[str, Any]:
    """Convert a validated payload into column values.

    Blank optional fields become None (or the entity default). Numbers become
    Decimal (int for whole-number fields), dates become ISO strings.

    Args:
        spec: Entity definition
        data: Payload that passed validate_payload
        for_update: Leave out columns that cannot change after creation

    Returns:
        Column-value dictionary covering every writable column
    """
    columns = spec.updatable_columns if for_update else spec.columns
    values: dict[str, Any] = {}

    for column in columns:
        raw = data.get(column)

        if is_blank(raw):
            values[column] = spec.defaults.get(column)
        elif column in spec.numeric:
            number = parse_number(raw)
            values[column] = int(number) if spec.numeric[column].integer else number
        elif column in spec.dates:
            values[column] = parse_date(raw).isoformat()
        elif column in spec.booleans:
            values[column] = parse_bool(raw)
        else:
            values[column] = raw.strip()

    return values


def validate_expense(data: Any) -> ValidationResult:
    return validate_payload(EXPENSE, data)


def validate_liability(data: Any) -> ValidationResult:
    return validate_payload(LIABILITY, data)


def validate_employee(data: Any) -> ValidationResult:
    return validate_payload(EMPLOYEE, data)


def validate_salary(data: Any, require_employee: bool = True) -> ValidationResult:
    """Validate a salary record payload.

    Updates never move a record to another employee, so they are checked
    with require_employee=False.
    """
    skip = () if require_employee else SALARY.immutable
    return validate_payload(SALARY, data, skip=skip)


def validate_cashflow(data: Any) -> ValidationResult:
    return validate_payload(CASHFLOW, data)


def validate_pdc(data: Any) -> ValidationResult:
    return validate_payload(PDC, data)


def validate_capital_injection(data: Any) -> ValidationResult:
    return validate_payload(CAPITAL_INJECTION, data)


def validate_profile(data: Any) -> ValidationResult:
    return validate_payload(PROFILE, data)
