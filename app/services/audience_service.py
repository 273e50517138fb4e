"""
Audience Service

Runs compiled audience rules against the customers table: size estimation,
preview samples and the full member list.
"""

import logging
from typing import Any, Dict, List, Mapping, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer
from app.schemas.audience_rules import RuleDocument
from app.services.audience_rules import compile_rules

logger = logging.getLogger(__name__)

Rules = Union[RuleDocument, Mapping[str, Any], None]


class AudienceService:
    """Audience queries for segments and campaign previews."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count(self, rules: Rules) -> int:
        """Number of customers matching the rules."""
        query = select(func.count(Customer.id)).where(compile_rules(rules))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def sample(self, rules: Rules, limit: int = 5) -> List[Dict[str, Any]]:
        """A few matching customers for previews."""
        query = (
            select(Customer)
            .where(compile_rules(rules))
            .order_by(Customer.id)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [
            {
                "id": customer.id,
                "name": customer.name,
                "email": customer.email,
                "totalSpending": customer.total_spending,
                "visitCount": customer.visit_count,
            }
            for customer in result.scalars().all()
        ]

    async def list_customers(self, rules: Rules) -> List[Customer]:
        """Every matching customer."""
        query = select(Customer).where(compile_rules(rules)).order_by(Customer.id)
        result = await self.db.execute(query)
        customers = list(result.scalars().all())
        logger.debug(f"Audience resolved to {len(customers)} customers")
        return customers
