"""Policy administration domain models."""

from stone_river.models.policy.customer import Customer
from stone_river.models.policy.enums import (
    STICKY_STATUSES,
    CashBackAddon,
    ComplianceModel,
    FuneralPackage,
    Gender,
    MedicalPackage,
    ParticipantCategory,
    PaymentMethod,
    PolicyStatus,
    PremiumPeriod,
    Relationship,
)
from stone_river.models.policy.participant import Participant
from stone_river.models.policy.payment import Payment

__all__ = [
    "CashBackAddon",
    "ComplianceModel",
    "Customer",
    "FuneralPackage",
    "Gender",
    "MedicalPackage",
    "Participant",
    "ParticipantCategory",
    "Payment",
    "PaymentMethod",
    "PolicyStatus",
    "PremiumPeriod",
    "Relationship",
    "STICKY_STATUSES",
]
