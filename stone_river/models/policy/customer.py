"""Customer (policy holder) model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from stone_river.models.policy.enums import PolicyStatus
from stone_river.models.policy.participant import Participant


@dataclass
class Customer:
    """Policy holder entity."""

    customer_id: int
    policy_number: str
    first_name: str
    surname: str
    id_number: str = ""
    date_of_birth: str | None = None
    gender: str = ""
    phone: str = ""
    email: str = ""
    street_address: str = ""
    town: str = ""
    postal_address: str = ""
    funeral_package: str = ""
    status: PolicyStatus = PolicyStatus.ACTIVE
    inception_date: str | None = None  # As stored; standardized to YYYY-MM-DD by InceptionDateJob
    cover_date: str | None = None
    premium_period: str = "Monthly"
    total_premium: Decimal = Decimal("0")
    policy_premium: Decimal = Decimal("0")
    addon_premium: Decimal = Decimal("0")
    assigned_agent_id: int | None = None
    participants: list[Participant] = field(default_factory=list)
    latest_receipt_date: str | None = None
    date_created: datetime | None = None
    last_updated: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()
