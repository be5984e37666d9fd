"""Duplicate detection for payment receipts and customer uploads."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from stone_river.engines.duplicates import normalize_id_number
from stone_river.models.policy.payment import Payment

AMOUNT_TOLERANCE = Decimal("0.01")

# Column names seen for the policy-holder id in agent spreadsheets
ID_FIELD_ALIASES = (
    "id_number",
    "ID Number",
    "idNumber",
    "PolicyHolderID",
    "policy_holder_id",
    "ID_Number",
    "Id Number",
    "IDNUMBER",
)


def is_duplicate_payment(candidate: Payment, existing: Payment) -> bool:
    """Same policy, date and period, with amounts closer than one cent."""
    return (
        candidate.policy_number == existing.policy_number
        and candidate.payment_date == existing.payment_date
        and candidate.payment_period == existing.payment_period
        and abs(candidate.payment_amount - existing.payment_amount) < AMOUNT_TOLERANCE
    )


def find_duplicate_payments(payments: Iterable[Payment]) -> list[tuple[Payment, Payment]]:
    """Return (duplicate, original) pairs, original being the first seen."""
    seen: dict[tuple, list[Payment]] = {}
    pairs = []
    for payment in payments:
        key = (payment.policy_number, payment.payment_date, payment.payment_period)
        bucket = seen.setdefault(key, [])
        original = next((p for p in bucket if is_duplicate_payment(payment, p)), None)
        if original is not None:
            pairs.append((payment, original))
        else:
            bucket.append(payment)
    return pairs


def filter_new_payments(
    candidates: Iterable[Payment],
    existing: Iterable[Payment],
) -> tuple[list[Payment], list[Payment]]:
    """Split incoming receipts into (new, duplicates) against stored payments."""
    known = list(existing)
    fresh: list[Payment] = []
    duplicates: list[Payment] = []
    for candidate in candidates:
        if any(is_duplicate_payment(candidate, p) for p in known):
            duplicates.append(candidate)
        else:
            fresh.append(candidate)
            known.append(candidate)
    return fresh, duplicates


def extract_policy_holder_id(record: dict[str, Any]) -> str | None:
    """Policy-holder id from the first populated alias column."""
    for name in ID_FIELD_ALIASES:
        value = record.get(name)
        if value not in (None, ""):
            text = str(value).strip()
            if text:
                return text
    return None


@dataclass
class UploadValidationReport:
    """Pre-upload duplicate check of a customer file."""

    total_records: int = 0
    duplicates_in_file: list[dict] = field(default_factory=list)
    duplicates_with_database: list[dict] = field(default_factory=list)
    other_errors: list[dict] = field(default_factory=list)

    @property
    def valid_records(self) -> int:
        flagged = {d["record_numbers"][-1] for d in self.duplicates_in_file}
        flagged.update(d["record_number"] for d in self.duplicates_with_database)
        flagged.update(e["record_number"] for e in self.other_errors)
        return self.total_records - len(flagged)

    @property
    def can_proceed(self) -> bool:
        return not (self.duplicates_in_file or self.duplicates_with_database or self.other_errors)

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "valid_records": self.valid_records,
            "can_proceed": self.can_proceed,
            "duplicates_in_file": self.duplicates_in_file,
            "duplicates_with_database": self.duplicates_with_database,
            "other_errors": self.other_errors,
        }


def validate_upload(
    records: list[dict[str, Any]],
    existing_ids: Iterable[str],
) -> UploadValidationReport:
    """Check an upload for duplicate policy-holder ids.

    Parameters
    ----------
    records : list[dict]
        Rows of the upload file, keyed by column header.
    existing_ids : Iterable[str]
        Id numbers already present in the database.

    Returns
    -------
    UploadValidationReport
        Record numbers are 1-based, matching spreadsheet rows under the header.
    """
    known = {normalize_id_number(i) for i in existing_ids if i}
    known.discard("")
    report = UploadValidationReport(total_records=len(records))
    first_seen: dict[str, int] = {}

    for record_number, record in enumerate(records, start=1):
        holder_id = extract_policy_holder_id(record)
        if holder_id is None:
            report.other_errors.append({
                "record_number": record_number,
                "error": "Missing Policy Holder ID",
            })
            continue

        key = normalize_id_number(holder_id)
        if key in first_seen:
            report.duplicates_in_file.append({
                "policy_holder_id": holder_id,
                "record_numbers": [first_seen[key], record_number],
            })
        else:
            first_seen[key] = record_number

        if key in known:
            report.duplicates_with_database.append({
                "policy_holder_id": holder_id,
                "record_number": record_number,
            })

    return report
