"""
Test factories for generating realistic test data.

Uses factory_boy for declarative test data generation.
"""

from .customer import CustomerFactory, BigSpenderFactory, LapsedCustomerFactory

__all__ = [
    "CustomerFactory",
    "BigSpenderFactory",
    "LapsedCustomerFactory",
]
