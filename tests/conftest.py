"""Pytest configuration and fixtures."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable

import pytest

from stone_river.models.policy import Customer, Participant, Payment, PolicyStatus
from stone_river.store.policy import PolicyDataStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Fixed evaluation date."""
    return date(2024, 4, 1)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed clock for update timestamps."""
    return datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_participant() -> Callable[..., Participant]:
    """Factory for participants."""

    def _make(first_name: str, relationship: str, suffix: str | None = None, **kwargs) -> Participant:
        return Participant(
            first_name=first_name,
            surname=kwargs.pop("surname", "Moyo"),
            relationship=relationship,
            suffix=suffix,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_customer() -> Callable[..., Customer]:
    """Factory for customers with sensible defaults."""

    def _make(customer_id: int = 1, **kwargs) -> Customer:
        defaults = {
            "policy_number": f"SR{customer_id:06d}",
            "first_name": "Tendai",
            "surname": "Moyo",
            "id_number": f"63-{100000 + customer_id}A78",
            "date_of_birth": "1980-05-17",
            "gender": "Female",
            "phone": "+263771234567",
            "funeral_package": "Chitomborwizi Standard",
            "status": PolicyStatus.ACTIVE,
            "inception_date": "2024-01-01",
            "total_premium": Decimal("10.00"),
        }
        defaults.update(kwargs)
        return Customer(customer_id=customer_id, **defaults)

    return _make


@pytest.fixture
def make_payment() -> Callable[..., Payment]:
    """Factory for payments."""

    def _make(customer: Customer, payment_date: str, amount: str = "10.00", **kwargs) -> Payment:
        return Payment(
            payment_id=kwargs.pop("payment_id", None),
            customer_id=customer.customer_id,
            policy_number=customer.policy_number,
            payment_amount=Decimal(amount),
            payment_date=payment_date,
            **kwargs,
        )

    return _make


@pytest.fixture
def store() -> PolicyDataStore:
    """Create a fresh store for each test."""
    return PolicyDataStore()
