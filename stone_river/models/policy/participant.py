"""Participant model for policy administration."""

from dataclasses import dataclass


@dataclass
class Participant:
    """A person covered under a customer's policy (the principal included)."""

    first_name: str
    surname: str
    relationship: str  # Raw legacy text; categorized by the suffix engine
    participant_id: int | None = None
    uuid: str | None = None
    date_of_birth: str | None = None
    id_number: str = ""
    gender: str = ""
    suffix: str | None = None  # Three-digit code, e.g. "000", "101", "201"
    medical_package: str = ""
    cash_back_addon: str = ""
    is_student: bool = False
    phone: str = ""
    email: str = ""
    street_address: str = ""
    town: str = ""
    postal_address: str = ""
    sort_key: int = 0  # Position in canonical order (Principal, Spouse, Child, Dependent)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()
