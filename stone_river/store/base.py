"""Storage interface shared by the in-memory and Postgres stores."""

from datetime import datetime
from typing import Iterable, Protocol

from stone_river.models.policy import Customer, Participant, Payment, PolicyStatus


class PolicyStore(Protocol):
    """Operations the batch jobs need from a backing store."""

    def load_customers(self) -> list[Customer]:
        ...

    def load_payments(self) -> list[Payment]:
        ...

    def existing_id_numbers(self) -> set[str]:
        ...

    def update_status(self, customer_id: int, status: PolicyStatus, updated_at: datetime) -> None:
        ...

    def replace_participants(
        self,
        customer_id: int,
        participants: list[Participant],
        updated_at: datetime,
    ) -> None:
        ...

    def update_inception_date(self, customer_id: int, value: str) -> None:
        ...

    def delete_customer(self, customer_id: int) -> None:
        ...

    def add_payments(self, payments: Iterable[Payment], chunk_size: int = 100) -> int:
        ...
