"""Enumeration types for policy administration entities."""

from enum import Enum


class PolicyStatus(str, Enum):
    ACTIVE = "Active"
    OVERDUE = "Overdue"
    SUSPENDED = "Suspended"
    CANCELLED = "Cancelled"
    EXPRESS = "Express"
    INACTIVE = "Inactive"
    GRACE_PERIOD = "Grace Period"
    LAPSED = "Lapsed"

    @classmethod
    def parse(cls, value: "str | PolicyStatus | None") -> "PolicyStatus":
        """Map a stored status string onto the enum; unknown values become INACTIVE."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.INACTIVE
        text = str(value).strip().lower()
        for status in cls:
            if status.value.lower() == text:
                return status
        return cls.INACTIVE

    @property
    def is_sticky(self) -> bool:
        """Sticky statuses are never recomputed by the compliance engine."""
        return self in STICKY_STATUSES


STICKY_STATUSES = frozenset({PolicyStatus.CANCELLED, PolicyStatus.EXPRESS})


class Relationship(str, Enum):
    SELF = "Self"
    PRINCIPAL_MEMBER = "Principal Member"
    POLICY_HOLDER = "Policy Holder"
    SPOUSE = "Spouse"
    CHILD = "Child"
    STEPCHILD = "Stepchild"
    GRANDCHILD = "Grandchild"
    SIBLING = "Sibling"
    PARENT = "Parent"
    GRANDPARENT = "Grandparent"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: "str | Relationship | None") -> "Relationship":
        """Match a free-form relationship string; anything unrecognized is OTHER."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.OTHER
        text = " ".join(str(value).split()).lower()
        for relationship in cls:
            if relationship.value.lower() == text:
                return relationship
        return cls.OTHER


class ParticipantCategory(str, Enum):
    """Family-role bucket that decides a participant's suffix band."""

    PRINCIPAL = "PRINCIPAL"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"
    DEPENDENT = "DEPENDENT"

    @property
    def base(self) -> int:
        return _SUFFIX_BASES[self]

    @property
    def band(self) -> tuple[int, int]:
        """Inclusive numeric range a suffix in this category must fall in."""
        return _SUFFIX_BANDS[self]

    @property
    def label(self) -> str:
        return self.value.title()


_SUFFIX_BASES = {
    ParticipantCategory.PRINCIPAL: 0,
    ParticipantCategory.SPOUSE: 101,
    ParticipantCategory.CHILD: 201,
    ParticipantCategory.DEPENDENT: 301,
}

_SUFFIX_BANDS = {
    ParticipantCategory.PRINCIPAL: (0, 0),
    ParticipantCategory.SPOUSE: (101, 199),
    ParticipantCategory.CHILD: (201, 299),
    ParticipantCategory.DEPENDENT: (301, 399),
}


class PremiumPeriod(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"

    @classmethod
    def parse(cls, value: "str | PremiumPeriod | None") -> "PremiumPeriod":
        """Tolerant parse of legacy period labels; defaults to MONTHLY."""
        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower()
        if text in ("quarterly", "quarter"):
            return cls.QUARTERLY
        if text in ("annually", "annual", "yearly", "year"):
            return cls.ANNUALLY
        return cls.MONTHLY


class PaymentMethod(str, Enum):
    CASH = "Cash"
    ECOCASH = "EcoCash"
    BANK_TRANSFER = "Bank Transfer"
    STOP_ORDER = "Stop Order"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class FuneralPackage(str, Enum):
    LITE = "Chitomborwizi Lite"
    STANDARD = "Chitomborwizi Standard"
    PREMIUM = "Chitomborwizi Premium"


class MedicalPackage(str, Enum):
    NONE = "No Medical Aid"
    ZIMHEALTH = "ZimHealth"
    FAMILY_LIFE = "Family Life"
    ALKAANE = "Alkaane"


class CashBackAddon(str, Enum):
    NONE = "No Cash Back"
    CB1 = "CB1"
    CB2 = "CB2"
    CB3 = "CB3"
    CB4 = "CB4"


class ComplianceModel(str, Enum):
    """Which payment compliance model a run uses (never mixed within one run)."""

    ARREARS = "arrears"
    GRACE_PERIOD = "grace_period"
