"""Condition field and operator catalog.

Field/operator legality is kept as data: every field belongs to a category
and every category lists the operators it accepts. Adding a category means
adding rows to these tables, not branches to the editor.

The editor core never rejects a condition because of this catalog. Unknown
fields or operators outside a field's category are carried verbatim and only
reported by validation.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple


class FieldCategory(str, Enum):
    """Category tag that decides which operators a field accepts."""

    ENUM = "enum"
    REFERENCE = "reference"
    NUMERIC = "numeric"
    DATE = "date"
    TEXT = "text"
    TAGS = "tags"


class ConditionField(str, Enum):
    """Record attributes a condition can inspect."""

    STATUS = "status"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"
    AMOUNT = "amount"
    CLIENT_ID = "client_id"
    DUE_DATE = "due_date"
    TAGS = "tags"


class Operator(str, Enum):
    """Comparison operators."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS_ANY = "contains_any"
    CONTAINS_ALL = "contains_all"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class FieldSpec(NamedTuple):
    label: str
    category: FieldCategory


FIELD_CATALOG: Dict[ConditionField, FieldSpec] = {
    ConditionField.STATUS: FieldSpec("Status", FieldCategory.ENUM),
    ConditionField.ASSIGNEE: FieldSpec("Assignee", FieldCategory.REFERENCE),
    ConditionField.PRIORITY: FieldSpec("Priority", FieldCategory.ENUM),
    ConditionField.AMOUNT: FieldSpec("Amount", FieldCategory.NUMERIC),
    ConditionField.CLIENT_ID: FieldSpec("Client", FieldCategory.REFERENCE),
    ConditionField.DUE_DATE: FieldSpec("Due Date", FieldCategory.DATE),
    ConditionField.TAGS: FieldSpec("Tags", FieldCategory.TAGS),
}

OPERATOR_LABELS: Dict[Operator, str] = {
    Operator.EQUALS: "Equals",
    Operator.NOT_EQUALS: "Not Equals",
    Operator.CONTAINS: "Contains",
    Operator.STARTS_WITH: "Starts With",
    Operator.ENDS_WITH: "Ends With",
    Operator.GREATER_THAN: "Greater Than",
    Operator.LESS_THAN: "Less Than",
    Operator.GREATER_THAN_OR_EQUAL: "Greater Than or Equal",
    Operator.LESS_THAN_OR_EQUAL: "Less Than or Equal",
    Operator.IN: "Is One Of",
    Operator.NOT_IN: "Is Not One Of",
    Operator.CONTAINS_ANY: "Contains Any",
    Operator.CONTAINS_ALL: "Contains All",
    Operator.EXISTS: "Exists",
    Operator.NOT_EXISTS: "Does Not Exist",
    Operator.IS_EMPTY: "Is Empty",
    Operator.IS_NOT_EMPTY: "Is Not Empty",
}

_PRESENCE = (Operator.EXISTS, Operator.NOT_EXISTS, Operator.IS_EMPTY, Operator.IS_NOT_EMPTY)
_ORDERING = (
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN_OR_EQUAL,
)

OPERATORS_BY_CATEGORY: Dict[FieldCategory, Tuple[Operator, ...]] = {
    FieldCategory.ENUM: (Operator.EQUALS, Operator.NOT_EQUALS, Operator.IN, Operator.NOT_IN) + _PRESENCE,
    FieldCategory.REFERENCE: (Operator.EQUALS, Operator.NOT_EQUALS, Operator.IN, Operator.NOT_IN) + _PRESENCE,
    FieldCategory.NUMERIC: (Operator.EQUALS, Operator.NOT_EQUALS) + _ORDERING + _PRESENCE,
    FieldCategory.DATE: (Operator.EQUALS, Operator.NOT_EQUALS) + _ORDERING + _PRESENCE,
    FieldCategory.TEXT: (
        Operator.EQUALS,
        Operator.NOT_EQUALS,
        Operator.CONTAINS,
        Operator.STARTS_WITH,
        Operator.ENDS_WITH,
    ) + _PRESENCE,
    FieldCategory.TAGS: (
        Operator.CONTAINS,
        Operator.CONTAINS_ANY,
        Operator.CONTAINS_ALL,
    ) + _PRESENCE,
}

# Operators whose value is ignored.
VALUELESS_OPERATORS = frozenset(_PRESENCE)

DEFAULT_FIELD = ConditionField.STATUS.value
DEFAULT_OPERATOR = Operator.EQUALS.value

_FIELDS_BY_VALUE = {f.value: f for f in ConditionField}
_OPERATORS_BY_VALUE = {o.value: o for o in Operator}


def lookup_field(field: str) -> Optional[ConditionField]:
    return _FIELDS_BY_VALUE.get(field)


def lookup_operator(operator: str) -> Optional[Operator]:
    return _OPERATORS_BY_VALUE.get(operator)


def category_of(field: str) -> Optional[FieldCategory]:
    """Category of a catalog field, or None for fields outside the catalog."""
    known = lookup_field(field)
    if known is None:
        return None
    return FIELD_CATALOG[known].category


def operators_for(field: str) -> Tuple[Operator, ...]:
    """Operators legal for a field. Unknown fields accept every operator."""
    category = category_of(field)
    if category is None:
        return tuple(Operator)
    return OPERATORS_BY_CATEGORY[category]


def is_operator_allowed(field: str, operator: str) -> bool:
    known = lookup_operator(operator)
    if known is None:
        return False
    return known in operators_for(field)


def requires_value(operator: str) -> bool:
    known = lookup_operator(operator)
    return known is not None and known not in VALUELESS_OPERATORS


def field_options() -> List[Tuple[str, str]]:
    """(value, label) pairs for every catalog field, in catalog order."""
    return [(field.value, spec.label) for field, spec in FIELD_CATALOG.items()]


def operator_options(field: str) -> List[Tuple[str, str]]:
    """(value, label) pairs for the operators legal on ``field``."""
    return [(op.value, OPERATOR_LABELS[op]) for op in operators_for(field)]
