"""Duplicate policy-holder resolution.

Customers sharing a national id number are grouped, and one canonical
record per group is kept. The winner is chosen by, in order: most recent
``last_updated`` (present beats missing), highest completeness score,
most recent ``date_created`` (present beats missing), highest id.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from stone_river.models.policy.customer import Customer

COMPLETENESS_FIELDS = (
    "first_name",
    "surname",
    "id_number",
    "date_of_birth",
    "gender",
    "phone",
    "email",
    "street_address",
    "town",
    "postal_address",
    "funeral_package",
    "total_premium",
)
PARTICIPANT_POINTS = 2
RECEIPT_POINTS = 3

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)
_ID_SEPARATORS = re.compile(r"[-\s]")

# Human-readable name for each position of the ranking key
_TIE_BREAKS = (
    "last updated present",
    "most recently updated",
    "higher completeness score",
    "creation date present",
    "most recently created",
    "highest id",
)


@dataclass
class DuplicateGroup:
    """Customers sharing one normalized id number."""

    id_number: str
    records: list[Customer]


@dataclass
class Resolution:
    """Keep/delete decision for one duplicate group."""

    id_number: str
    keep: Customer
    delete: list[Customer] = field(default_factory=list)
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "id_number": self.id_number,
            "reason": self.reason,
            "keep": _describe(self.keep),
            "delete": [_describe(c) for c in self.delete],
        }


def normalize_id_number(value: str | None) -> str:
    """Strip dashes and whitespace, upper-case."""
    return _ID_SEPARATORS.sub("", value or "").upper()


def _is_filled(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() not in ("", "N/A")
    return bool(value)


def completeness_score(customer: Customer) -> int:
    """Count filled canonical fields plus participant and receipt bonuses."""
    score = sum(1 for name in COMPLETENESS_FIELDS if _is_filled(getattr(customer, name)))
    score += PARTICIPANT_POINTS * len(customer.participants)
    if customer.latest_receipt_date:
        score += RECEIPT_POINTS
    return score


def _ranking_key(customer: Customer) -> tuple:
    return (
        customer.last_updated is not None,
        customer.last_updated or _EPOCH,
        completeness_score(customer),
        customer.date_created is not None,
        customer.date_created or _EPOCH,
        customer.customer_id,
    )


def find_duplicate_groups(customers: Iterable[Customer]) -> list[DuplicateGroup]:
    """Group customers by normalized id number; blank ids are skipped."""
    by_id: dict[str, list[Customer]] = {}
    for customer in customers:
        key = normalize_id_number(customer.id_number)
        if key:
            by_id.setdefault(key, []).append(customer)

    return [
        DuplicateGroup(id_number=key, records=records)
        for key, records in sorted(by_id.items())
        if len(records) > 1
    ]


def select_canonical(records: list[Customer]) -> Customer:
    """Pick the record to keep; the result does not depend on input order."""
    return max(records, key=_ranking_key)


def resolve_group(group: DuplicateGroup) -> Resolution:
    """Decide which record of a group survives and explain why."""
    ranked = sorted(group.records, key=_ranking_key, reverse=True)
    keep = ranked[0]
    delete = ranked[1:]

    reason = "single record"
    if delete:
        winner, runner_up = _ranking_key(keep), _ranking_key(delete[0])
        for position, (a, b) in enumerate(zip(winner, runner_up)):
            if a != b:
                reason = _TIE_BREAKS[position]
                break
        else:
            reason = "identical ranking"

    return Resolution(id_number=group.id_number, keep=keep, delete=delete, reason=reason)


def plan_resolutions(customers: Iterable[Customer]) -> list[Resolution]:
    """Resolve every duplicate group without touching storage."""
    return [resolve_group(group) for group in find_duplicate_groups(customers)]


def _describe(customer: Customer) -> dict:
    return {
        "id": customer.customer_id,
        "policy_number": customer.policy_number,
        "name": customer.full_name,
        "last_updated": customer.last_updated.isoformat() if customer.last_updated else None,
        "date_created": customer.date_created.isoformat() if customer.date_created else None,
        "participants": len(customer.participants),
        "completeness": completeness_score(customer),
    }
