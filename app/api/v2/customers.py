"""
Customers API - ingestion of the records audience rules run against.
"""

from fastapi import APIRouter, status
from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional
import logging

from app.api.deps import DbSession
from app.exceptions import ConflictError, NotFoundError
from app.models.customer import Customer
from app.schemas.customer import (
    CustomerCreate,
    CustomerBulkCreate,
    CustomerBulkResult,
    CustomerResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _as_naive_utc(value: Optional[datetime]) -> datetime:
    """last_visit is stored as naive UTC; missing means 'now'."""
    if value is None:
        return datetime.utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _build_customer(data: CustomerCreate) -> Customer:
    return Customer(
        name=data.name,
        email=data.email,
        phone=data.phone,
        total_spending=data.total_spending,
        visit_count=data.visit_count,
        last_visit=_as_naive_utc(data.last_visit),
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: int, db: DbSession):
    """Get a single customer by ID."""
    result = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = result.scalar_one_or_none()

    if not customer:
        raise NotFoundError("Customer", str(customer_id))

    return customer


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(data: CustomerCreate, db: DbSession):
    """Create a new customer."""
    result = await db.execute(select(Customer.id).where(Customer.email == data.email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Customer with email {data.email} already exists")

    customer = _build_customer(data)
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return customer


@router.post("/bulk", response_model=CustomerBulkResult, status_code=status.HTTP_201_CREATED)
async def bulk_create_customers(data: CustomerBulkCreate, db: DbSession):
    """Create many customers; emails that already exist (or repeat in the batch) are skipped."""
    emails = {row.email for row in data.customers}
    result = await db.execute(select(Customer.email).where(Customer.email.in_(emails)))
    seen = set(result.scalars().all())

    new_customers = []
    for row in data.customers:
        if row.email in seen:
            continue
        seen.add(row.email)
        new_customers.append(_build_customer(row))

    db.add_all(new_customers)
    await db.commit()

    skipped = len(data.customers) - len(new_customers)
    logger.info(f"Bulk customer import: created={len(new_customers)} skipped={skipped}")
    return CustomerBulkResult(created=len(new_customers), skipped=skipped)
