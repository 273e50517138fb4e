"""
Customer test factory.

Generates customer rows with the attributes audience rules filter on.
"""

from datetime import datetime, timedelta

import factory
from faker import Faker

fake = Faker()


class CustomerFactory(factory.Factory):
    """
    Factory for generating Customer test data.

    Usage:
        data = CustomerFactory(total_spending=750.0)
        customer = Customer(**CustomerFactory())
    """

    class Meta:
        model = dict

    name = factory.LazyFunction(fake.name)
    email = factory.Sequence(lambda n: f"customer{n}@example.com")
    phone = factory.LazyFunction(lambda: fake.phone_number()[:20])
    total_spending = factory.LazyFunction(
        lambda: float(fake.random_int(min=0, max=400))
    )
    visit_count = factory.LazyFunction(lambda: fake.random_int(min=0, max=3))
    last_visit = factory.LazyFunction(
        lambda: datetime.utcnow() - timedelta(days=fake.random_int(min=0, max=20))
    )


class BigSpenderFactory(CustomerFactory):
    """Frequent, high-spending customers."""

    total_spending = factory.LazyFunction(
        lambda: float(fake.random_int(min=1000, max=5000))
    )
    visit_count = factory.LazyFunction(lambda: fake.random_int(min=5, max=20))


class LapsedCustomerFactory(CustomerFactory):
    """Customers whose last visit was more than 90 days ago."""

    last_visit = factory.LazyFunction(
        lambda: datetime.utcnow() - timedelta(days=fake.random_int(min=91, max=365))
    )
