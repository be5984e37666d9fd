"""Participant suffix assignment and validation.

Every participant on a policy carries a three-digit suffix encoding its
family role and order: ``000`` for the principal, ``101..`` for spouses,
``201..`` for children and ``301..`` for all other dependents. The engine
is a pure function of the participant list and the customer identity, so
running it on its own output changes nothing.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field, replace

from stone_river.models.policy.customer import Customer
from stone_river.models.policy.enums import (
    CashBackAddon,
    Gender,
    MedicalPackage,
    ParticipantCategory,
    Relationship,
)
from stone_river.models.policy.participant import Participant

logger = logging.getLogger(__name__)

PLACEHOLDER_DATE_OF_BIRTH = "1990-01-01"
PLACEHOLDER_GENDER = Gender.MALE.value
PLACEHOLDER_MEDICAL_PACKAGE = MedicalPackage.NONE.value
PLACEHOLDER_CASH_BACK = CashBackAddon.NONE.value

CATEGORY_ORDER = (
    ParticipantCategory.PRINCIPAL,
    ParticipantCategory.SPOUSE,
    ParticipantCategory.CHILD,
    ParticipantCategory.DEPENDENT,
)

_RELATIONSHIP_CATEGORIES = {
    Relationship.SELF: ParticipantCategory.PRINCIPAL,
    Relationship.PRINCIPAL_MEMBER: ParticipantCategory.PRINCIPAL,
    Relationship.POLICY_HOLDER: ParticipantCategory.PRINCIPAL,
    Relationship.SPOUSE: ParticipantCategory.SPOUSE,
    Relationship.CHILD: ParticipantCategory.CHILD,
    Relationship.STEPCHILD: ParticipantCategory.CHILD,
    Relationship.GRANDCHILD: ParticipantCategory.CHILD,
}

_SUFFIX_RE = re.compile(r"^\d{3}$")


@dataclass
class SuffixAssignment:
    """Result of assigning suffixes to one customer's participants."""

    participants: list[Participant]
    principal_added: bool = False
    changes: list[str] = field(default_factory=list)
    changed: bool = False
    overflow: list[str] = field(default_factory=list)


def categorize(relationship: str | Relationship | None) -> ParticipantCategory:
    """Map a relationship onto its suffix category.

    Unrecognized or missing relationships fall through to DEPENDENT.
    """
    return _RELATIONSHIP_CATEGORIES.get(
        Relationship.parse(relationship), ParticipantCategory.DEPENDENT
    )


def format_suffix(category: ParticipantCategory, index: int) -> str:
    """Suffix for the ``index``-th (zero-based) participant of a category."""
    if category is ParticipantCategory.PRINCIPAL:
        return "000"
    return f"{category.base + index:03d}"


def synthesize_principal(customer: Customer) -> Participant:
    """Build the principal participant from the customer's own identity.

    Missing fields are filled with placeholders so the synthesized record
    satisfies the participant schema. The uuid is derived from the
    customer id and policy number, so repeated runs produce the same one.
    """
    return Participant(
        first_name=customer.first_name or "",
        surname=customer.surname or "",
        relationship=Relationship.SELF.value,
        uuid=str(uuid.uuid5(uuid.NAMESPACE_OID, f"{customer.customer_id}:{customer.policy_number}")),
        date_of_birth=customer.date_of_birth or PLACEHOLDER_DATE_OF_BIRTH,
        id_number=customer.id_number or "",
        gender=customer.gender or PLACEHOLDER_GENDER,
        suffix="000",
        medical_package=PLACEHOLDER_MEDICAL_PACKAGE,
        cash_back_addon=PLACEHOLDER_CASH_BACK,
        phone=customer.phone or "",
        email=customer.email or "",
        street_address=customer.street_address or "",
        town=customer.town or "",
        postal_address=customer.postal_address or "",
    )


def assign_suffixes(participants: list[Participant], customer: Customer) -> SuffixAssignment:
    """Assign canonical suffixes to a customer's participants.

    Parameters
    ----------
    participants : list[Participant]
        Participants as currently stored. Not modified.
    customer : Customer
        Owner of the policy; used to synthesize a missing principal.

    Returns
    -------
    SuffixAssignment
        New participant list in canonical order (Principal, Spouse, Child,
        Dependent) with ``suffix`` and ``sort_key`` set.
    """
    buckets: dict[ParticipantCategory, list[tuple[int, Participant]]] = {
        category: [] for category in CATEGORY_ORDER
    }
    for position, participant in enumerate(participants):
        buckets[categorize(participant.relationship)].append((position, participant))

    principal_added = False
    if not buckets[ParticipantCategory.PRINCIPAL]:
        buckets[ParticipantCategory.PRINCIPAL].append((-1, synthesize_principal(customer)))
        principal_added = True

    result: list[Participant] = []
    changes: list[str] = []
    changed = principal_added
    overflow: list[str] = []
    for category in CATEGORY_ORDER:
        capacity = category.band[1] - category.band[0] + 1
        if category is not ParticipantCategory.PRINCIPAL and len(buckets[category]) > capacity:
            message = (
                f"{len(buckets[category])} {category.label.lower()} participants exceed "
                f"the {capacity} suffixes of band {category.band[0]:03d}-{category.band[1]:03d}"
            )
            overflow.append(message)
            logger.warning("Policy %s: %s", customer.policy_number, message)
        for index, (position, participant) in enumerate(buckets[category]):
            suffix = format_suffix(category, index)
            sort_key = len(result)
            if position != sort_key or participant.sort_key != sort_key:
                changed = True
            if position >= 0 and participant.suffix != suffix:
                changes.append(f"{participant.full_name}: {participant.suffix or 'none'} -> {suffix}")
                changed = True
            result.append(replace(participant, suffix=suffix, sort_key=sort_key))

    if principal_added:
        changes.insert(0, f"{result[0].full_name}: principal member added -> 000")

    return SuffixAssignment(
        participants=result,
        principal_added=principal_added,
        changes=changes,
        changed=changed,
        overflow=overflow,
    )


def validate_suffixes(participants: list[Participant]) -> list[str]:
    """Check suffix presence, format, band and uniqueness.

    Returns human-readable issue strings; an empty list means compliant.
    Each participant contributes at most one presence/format/band issue.
    """
    issues = []
    seen: dict[str, list[str]] = {}

    for participant in participants:
        name = participant.full_name or "(unnamed)"
        category = categorize(participant.relationship)
        suffix = participant.suffix

        if not suffix:
            issues.append(f"Missing suffix for {name} ({category.label})")
            continue

        seen.setdefault(suffix, []).append(name)

        if not _SUFFIX_RE.match(suffix):
            issues.append(f"Invalid suffix format '{suffix}' for {name}: expected three digits")
            continue

        low, high = category.band
        if not low <= int(suffix) <= high:
            expected = "000" if low == high else f"{low:03d}-{high:03d}"
            issues.append(
                f"Suffix {suffix} for {name} does not match category "
                f"{category.label} (expected {expected})"
            )

    for suffix, names in seen.items():
        if len(names) > 1:
            issues.append(f"Duplicate suffix {suffix} shared by {', '.join(names)}")

    return issues


def has_principal(participants: list[Participant]) -> bool:
    return any(
        categorize(p.relationship) is ParticipantCategory.PRINCIPAL for p in participants
    )


def is_compliant(participants: list[Participant]) -> bool:
    """True when suffixes validate cleanly and the principal is present."""
    return has_principal(participants) and not validate_suffixes(participants)
