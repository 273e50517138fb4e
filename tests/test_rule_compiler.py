"""
Tests for the audience rule compiler.

Rules are compiled to SQLAlchemy clauses and evaluated against a SQLite
customers table through AudienceService.
"""

import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import False_, True_

from app.models.customer import Customer
from app.schemas.audience_rules import RuleCondition, RuleDocument, RuleLogic
from app.services.audience_rules import compile_rules
from app.services.audience_rules.compiler import compile_condition
from app.services.audience_service import AudienceService
from tests.factories import BigSpenderFactory, CustomerFactory, LapsedCustomerFactory


NOW = datetime(2026, 1, 31, 12, 0, 0)


def rules(*conditions, logic="AND"):
    return {
        "logic": logic,
        "conditions": [
            {"field": field, "operator": operator, "value": value}
            for field, operator, value in conditions
        ],
    }


class TestCompileShape:
    """Clause shape without touching the database."""

    def test_missing_rules_match_everything(self):
        assert isinstance(compile_rules(None), True_)
        assert isinstance(compile_rules({}), True_)
        assert isinstance(compile_rules({"conditions": "nope"}), True_)

    def test_empty_and_matches_everything(self):
        assert isinstance(compile_rules(rules()), True_)

    def test_empty_or_matches_nothing(self):
        assert isinstance(compile_rules(rules(logic="OR")), False_)

    def test_unusable_conditions_are_skipped(self):
        assert compile_condition({"field": "unknown", "operator": ">", "value": 1}) is None
        assert compile_condition({"field": "totalSpending", "operator": "=", "value": 1}) is None
        assert compile_condition({"field": "totalSpending", "operator": ">", "value": "lots"}) is None
        assert compile_condition({"field": "visitCount", "operator": ">=", "value": 2}) is None
        assert compile_condition({"field": "email", "operator": "=", "value": "a@b.c"}) is None
        assert compile_condition({"field": ["x"], "operator": ">", "value": 1}) is None
        assert compile_condition("totalSpending > 5") is None

    def test_or_of_only_unusable_conditions_matches_nothing(self):
        compiled = compile_rules(rules(("emailCount", ">", 3), logic="OR"))
        assert isinstance(compiled, False_)

    def test_connectors_do_not_change_the_clause(self):
        base = rules(("totalSpending", ">", 500), ("visitCount", ">", 3))
        with_or = dict(base, connectors=["OR"])
        assert str(compile_rules(base, now=NOW)) == str(compile_rules(with_or, now=NOW))


@pytest.fixture
def service(test_db: AsyncSession) -> AudienceService:
    return AudienceService(test_db)


@pytest_asyncio.fixture
async def customers(test_db: AsyncSession):
    """Three customers with known spending, visits and recency."""
    rows = [
        Customer(**CustomerFactory(
            name="Asha", email="asha@shop.io", total_spending=750.0, visit_count=6,
            last_visit=NOW - timedelta(days=90),
        )),
        Customer(**CustomerFactory(
            name="Ben", email="ben@mail.com", total_spending=500.0, visit_count=2,
            last_visit=NOW - timedelta(days=5),
        )),
        Customer(**CustomerFactory(
            name="Chen", email="chen@shop.io", total_spending=120.0, visit_count=4,
            last_visit=NOW - timedelta(days=40),
        )),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return rows


class TestCompileAgainstDatabase:

    @pytest.mark.asyncio
    async def test_spending_operators(self, service, customers):
        assert await service.count(rules(("totalSpending", ">", 500))) == 1
        assert await service.count(rules(("totalSpending", ">=", 500))) == 2
        assert await service.count(rules(("totalSpending", "<", 500))) == 1
        assert await service.count(rules(("totalSpending", "<=", 500))) == 2

    @pytest.mark.asyncio
    async def test_numeric_strings_are_compared_as_numbers(self, service, customers):
        assert await service.count(rules(("totalSpending", ">", "200"))) == 2

    @pytest.mark.asyncio
    async def test_visit_count(self, service, customers):
        assert await service.count(rules(("visitCount", ">", 3))) == 2
        assert await service.count(rules(("visitCount", "<", 3))) == 1

    @pytest.mark.asyncio
    async def test_last_visit_before_and_after(self, test_db, customers):
        before = compile_rules(rules(("lastVisit", "before", 30)), now=NOW)
        after = compile_rules(rules(("lastVisit", "after", 30)), now=NOW)

        result = await test_db.execute(select(Customer.name).where(before).order_by(Customer.name))
        assert result.scalars().all() == ["Asha", "Chen"]
        result = await test_db.execute(select(Customer.name).where(after))
        assert result.scalars().all() == ["Ben"]

    @pytest.mark.asyncio
    async def test_list_customers_orders_by_id(self, service, customers):
        members = await service.list_customers({"logic": "AND", "conditions": []})
        assert [c.name for c in members] == ["Asha", "Ben", "Chen"]

    @pytest.mark.asyncio
    async def test_email_contains(self, service, customers):
        assert await service.count(rules(("email", "contains", "@shop.io"))) == 2

    @pytest.mark.asyncio
    async def test_email_contains_escapes_wildcards(self, service, customers):
        assert await service.count(rules(("email", "contains", "%"))) == 0

    @pytest.mark.asyncio
    async def test_and_or_logic(self, service, customers):
        conditions = (("totalSpending", ">", 400), ("visitCount", ">", 3))
        assert await service.count(rules(*conditions)) == 1
        assert await service.count(rules(*conditions, logic="OR")) == 3

    @pytest.mark.asyncio
    async def test_unusable_conditions_contribute_nothing(self, service, customers):
        assert await service.count(rules(("emailCount", ">", 3))) == 3
        assert await service.count(rules(("totalSpending", ">", 400), ("nonsense", "~", "x"))) == 2
        # visitCount only honours strict comparisons
        assert await service.count(rules(("visitCount", ">=", 100))) == 3

    @pytest.mark.asyncio
    async def test_empty_or_matches_no_customers(self, service, customers):
        assert await service.count(rules(logic="OR")) == 0

    @pytest.mark.asyncio
    async def test_rule_document_input(self, service, customers):
        document = RuleDocument(
            logic=RuleLogic.OR,
            conditions=(
                RuleCondition(field="totalSpending", operator=">", value=700),
                RuleCondition(field="email", operator="contains", value="ben@"),
            ),
        )
        assert await service.count(document) == 2

    @pytest.mark.asyncio
    async def test_sample_is_limited_and_shaped(self, service, customers):
        sample = await service.sample(rules(("totalSpending", ">", 100)), limit=2)
        assert len(sample) == 2
        assert set(sample[0]) == {"id", "name", "email", "totalSpending", "visitCount"}

    @pytest.mark.asyncio
    async def test_factory_segments(self, test_db, service):
        test_db.add_all([Customer(**BigSpenderFactory()) for _ in range(3)])
        test_db.add_all([Customer(**LapsedCustomerFactory()) for _ in range(2)])
        await test_db.commit()

        assert await service.count(rules(("totalSpending", ">", 999))) == 3
        assert await service.count(rules(("lastVisit", "before", 90))) == 2
