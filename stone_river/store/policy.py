"""In-memory policy data store with referential integrity."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from stone_river.exceptions import EntityNotFoundError, ReferentialIntegrityError
from stone_river.models.policy import Customer, Participant, Payment, PolicyStatus


@dataclass
class PolicyDataStore:
    """In-memory store for customers and payments with relationship tracking.

    Backs tests, demos and dry runs. Reads return the stored objects;
    updates replace the stored customer with a modified copy, so a list
    returned by ``load_customers`` keeps the values it was loaded with.
    """

    customers: dict[int, Customer] = field(default_factory=dict)
    payments: list[Payment] = field(default_factory=list)

    # Relationship indexes
    _customer_payments: dict[int, list[int]] = field(default_factory=dict)
    _policy_numbers: dict[str, int] = field(default_factory=dict)

    _next_payment_id: int = 1

    def add_customer(self, customer: Customer) -> None:
        """Add a customer to the store."""
        self.customers[customer.customer_id] = customer
        self._customer_payments.setdefault(customer.customer_id, [])
        self._policy_numbers[customer.policy_number] = customer.customer_id

    def add_payment(self, payment: Payment) -> None:
        """Add a payment to the store."""
        if payment.customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {payment.customer_id} not found")

        if payment.payment_id is None:
            payment = replace(payment, payment_id=self._next_payment_id)
        self._next_payment_id = max(self._next_payment_id, payment.payment_id) + 1

        idx = len(self.payments)
        self.payments.append(payment)
        self._customer_payments[payment.customer_id].append(idx)

    def add_payments(self, payments: Iterable[Payment], chunk_size: int = 100) -> int:
        """Add payments; returns the number inserted."""
        count = 0
        for payment in payments:
            self.add_payment(payment)
            count += 1
        return count

    # Reads
    def load_customers(self) -> list[Customer]:
        """All customers ordered by policy number."""
        return sorted(self.customers.values(), key=lambda c: (c.policy_number, c.customer_id))

    def load_payments(self) -> list[Payment]:
        """All payments that still belong to a stored customer."""
        return [self.payments[i] for indices in self._customer_payments.values() for i in indices]

    def get_customer(self, customer_id: int) -> Customer:
        """Get a customer by id."""
        try:
            return self.customers[customer_id]
        except KeyError:
            raise EntityNotFoundError(f"Customer {customer_id} not found") from None

    def get_customer_by_policy(self, policy_number: str) -> Customer:
        """Get a customer by policy number."""
        customer_id = self._policy_numbers.get(policy_number)
        if customer_id is None:
            raise EntityNotFoundError(f"Policy {policy_number} not found")
        return self.customers[customer_id]

    def get_customer_payments(self, customer_id: int) -> list[Payment]:
        """Get all payments for a customer."""
        indices = self._customer_payments.get(customer_id, [])
        return [self.payments[i] for i in indices]

    def existing_id_numbers(self) -> set[str]:
        return {c.id_number for c in self.customers.values() if c.id_number}

    # Writes
    def update_status(self, customer_id: int, status: PolicyStatus, updated_at: datetime) -> None:
        """Set a customer's status and stamp ``last_updated``."""
        customer = self.get_customer(customer_id)
        self.customers[customer_id] = replace(customer, status=status, last_updated=updated_at)

    def replace_participants(
        self,
        customer_id: int,
        participants: list[Participant],
        updated_at: datetime,
    ) -> None:
        """Replace a customer's participant list and stamp ``last_updated``."""
        customer = self.get_customer(customer_id)
        ordered = sorted(participants, key=lambda p: p.sort_key)
        self.customers[customer_id] = replace(
            customer, participants=list(ordered), last_updated=updated_at
        )

    def update_inception_date(self, customer_id: int, value: str) -> None:
        """Store a standardized inception date."""
        customer = self.get_customer(customer_id)
        self.customers[customer_id] = replace(customer, inception_date=value)

    def delete_customer(self, customer_id: int) -> None:
        """Delete a customer together with its payments."""
        customer = self.get_customer(customer_id)
        del self.customers[customer_id]
        self._customer_payments.pop(customer_id, None)
        if self._policy_numbers.get(customer.policy_number) == customer_id:
            del self._policy_numbers[customer.policy_number]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "customers": len(self.customers),
            "participants": sum(len(c.participants) for c in self.customers.values()),
            "payments": sum(len(i) for i in self._customer_payments.values()),
        }
