"""Human-readable rendering of audience rule documents."""

from typing import Any, Mapping, Union

from app.schemas.audience_rules import RuleDocument

NO_CONDITIONS_MESSAGE = "No specific conditions identified"

CLAUSE_TEMPLATES = {
    "totalSpending": "customers who have spent {operator} {value}",
    "visitCount": "customers with {operator} {value} visits",
    "lastVisit": "customers who last visited {operator} {value} days ago",
}


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def explain_condition(condition: Mapping[str, Any]) -> str:
    field = condition.get("field")
    template = CLAUSE_TEMPLATES.get(field) if isinstance(field, str) else None
    template = template or "{field} {operator} {value}"
    return template.format(
        field=field,
        operator=condition.get("operator"),
        value=_format_value(condition.get("value")),
    )


def explain_rules(rules: Union[RuleDocument, Mapping[str, Any]]) -> str:
    """e.g. 'Targeting customers who have spent > 500 AND customers with > 3 visits'."""
    if isinstance(rules, RuleDocument):
        rules = rules.model_dump(mode="json")

    conditions = [c for c in rules.get("conditions") or [] if isinstance(c, Mapping)]
    if not conditions:
        return NO_CONDITIONS_MESSAGE

    joiner = " OR " if rules.get("logic") == "OR" else " AND "
    return "Targeting " + joiner.join(explain_condition(c) for c in conditions)
