"""
Audience rule compiler.

Turns a rule document into a SQLAlchemy boolean clause over `Customer`.
Compilation never fails: unknown fields, unsupported operators and
non-numeric values simply contribute no constraint.

Only the top-level `logic` decides how conditions combine; per-pair
`connectors` are informational and not read here.
"""

import operator as op
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Union

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from app.models.customer import Customer
from app.schemas.audience_rules import RuleDocument

FilterPredicate = ColumnElement[bool]

SPENDING_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    ">": op.gt,
    "<": op.lt,
    ">=": op.ge,
    "<=": op.le,
}

VISIT_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    ">": op.gt,
    "<": op.lt,
}


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _total_spending(operator: str, value: Any, now: datetime) -> Optional[FilterPredicate]:
    compare = SPENDING_OPERATORS.get(operator)
    number = _as_number(value)
    if compare is None or number is None:
        return None
    return compare(Customer.total_spending, number)


def _visit_count(operator: str, value: Any, now: datetime) -> Optional[FilterPredicate]:
    compare = VISIT_OPERATORS.get(operator)
    number = _as_number(value)
    if compare is None or number is None:
        return None
    return compare(Customer.visit_count, number)


def _last_visit(operator: str, value: Any, now: datetime) -> Optional[FilterPredicate]:
    days = _as_number(value)
    if days is None:
        return None
    try:
        cutoff = now - timedelta(days=days)
    except OverflowError:
        return None
    if operator == "before":
        # last activity more than `days` ago
        return Customer.last_visit < cutoff
    if operator == "after":
        return Customer.last_visit > cutoff
    return None


def _email(operator: str, value: Any, now: datetime) -> Optional[FilterPredicate]:
    if operator != "contains" or value is None:
        return None
    return Customer.email.contains(str(value), autoescape=True)


FIELD_COMPILERS: Dict[str, Callable[[str, Any, datetime], Optional[FilterPredicate]]] = {
    "totalSpending": _total_spending,
    "visitCount": _visit_count,
    "lastVisit": _last_visit,
    "email": _email,
}


def compile_condition(condition: Any, now: Optional[datetime] = None) -> Optional[FilterPredicate]:
    """Clause for a single condition, or None when it contributes no constraint."""
    if not isinstance(condition, Mapping):
        return None
    field = condition.get("field")
    operator = condition.get("operator")
    if not isinstance(field, str) or not isinstance(operator, str):
        return None
    compiler = FIELD_COMPILERS.get(field)
    if compiler is None:
        return None
    return compiler(operator, condition.get("value"), now or datetime.utcnow())


def compile_rules(
    rules: Union[RuleDocument, Mapping[str, Any], None],
    now: Optional[datetime] = None,
) -> FilterPredicate:
    """
    Compile a rule document into a filter over customers.

    - No `conditions` list: matches every customer.
    - AND (default) over zero usable clauses: matches every customer.
    - OR over zero usable clauses: matches no customer.
    """
    if isinstance(rules, RuleDocument):
        rules = rules.model_dump(mode="json")
    if not isinstance(rules, Mapping):
        return true()

    conditions = rules.get("conditions")
    if not isinstance(conditions, (list, tuple)):
        return true()

    now = now or datetime.utcnow()
    clauses = [
        clause
        for clause in (compile_condition(condition, now) for condition in conditions)
        if clause is not None
    ]

    if rules.get("logic") == "OR":
        return or_(*clauses) if clauses else false()
    return and_(*clauses) if clauses else true()
