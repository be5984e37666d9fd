"""Conversion between database rows and policy dataclasses.

Rows follow the ``customers`` / ``payments`` column names. Participants
arrive either as embedded camelCase JSON objects (the legacy
``customers.participants`` column) or as snake_case rows from the
``participants`` child table; both are accepted.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from stone_river.engines.dates import parse_timestamp
from stone_river.models.policy.customer import Customer
from stone_river.models.policy.enums import PolicyStatus
from stone_river.models.policy.participant import Participant
from stone_river.models.policy.payment import Payment

# camelCase JSON key -> Participant attribute
PARTICIPANT_JSON_FIELDS = {
    "id": "participant_id",
    "uuid": "uuid",
    "firstName": "first_name",
    "surname": "surname",
    "relationship": "relationship",
    "dateOfBirth": "date_of_birth",
    "idNumber": "id_number",
    "gender": "gender",
    "suffix": "suffix",
    "medicalPackage": "medical_package",
    "cashBackAddon": "cash_back_addon",
    "isStudent": "is_student",
    "phone": "phone",
    "email": "email",
    "streetAddress": "street_address",
    "town": "town",
    "postalAddress": "postal_address",
}


def to_decimal(value: Any) -> Decimal:
    """Parse a premium/amount column; garbled values become zero."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def participant_from_dict(data: dict[str, Any]) -> Participant:
    """Build a Participant from embedded JSON or a child-table row."""
    values: dict[str, Any] = {}
    for json_key, attr in PARTICIPANT_JSON_FIELDS.items():
        if json_key in data:
            values[attr] = data[json_key]
        elif attr in data:
            values[attr] = data[attr]

    # Older imports wrote the role into participantType instead of relationship
    relationship = values.get("relationship") or data.get("participantType") or ""

    return Participant(
        first_name=_text(values.get("first_name")),
        surname=_text(values.get("surname")),
        relationship=_text(relationship),
        participant_id=values.get("participant_id"),
        uuid=_optional_text(values.get("uuid")),
        date_of_birth=_optional_text(values.get("date_of_birth")),
        id_number=_text(values.get("id_number")),
        gender=_text(values.get("gender")),
        suffix=_optional_text(values.get("suffix")),
        medical_package=_text(values.get("medical_package")),
        cash_back_addon=_text(values.get("cash_back_addon")),
        is_student=bool(values.get("is_student", False)),
        phone=_text(values.get("phone")),
        email=_text(values.get("email")),
        street_address=_text(values.get("street_address")),
        town=_text(values.get("town")),
        postal_address=_text(values.get("postal_address")),
        sort_key=int(data.get("sort_key") or 0),
    )


def participant_to_dict(participant: Participant) -> dict[str, Any]:
    """Serialize a Participant to the embedded camelCase JSON shape."""
    return {
        json_key: getattr(participant, attr)
        for json_key, attr in PARTICIPANT_JSON_FIELDS.items()
    }


def customer_from_row(row: dict[str, Any]) -> Customer:
    """Build a Customer from a ``customers`` row."""
    participants = [participant_from_dict(p) for p in (row.get("participants") or [])]

    return Customer(
        customer_id=row["id"],
        policy_number=_text(row.get("policy_number")),
        first_name=_text(row.get("first_name")),
        surname=_text(row.get("surname")),
        id_number=_text(row.get("id_number")),
        date_of_birth=_optional_text(row.get("date_of_birth")),
        gender=_text(row.get("gender")),
        phone=_text(row.get("phone")),
        email=_text(row.get("email")),
        street_address=_text(row.get("street_address")),
        town=_text(row.get("town")),
        postal_address=_text(row.get("postal_address")),
        funeral_package=_text(row.get("funeral_package")),
        status=PolicyStatus.parse(row.get("status")),
        inception_date=_optional_text(row.get("inception_date")),
        cover_date=_optional_text(row.get("cover_date")),
        premium_period=_text(row.get("premium_period")) or "Monthly",
        total_premium=to_decimal(row.get("total_premium")),
        policy_premium=to_decimal(row.get("policy_premium")),
        addon_premium=to_decimal(row.get("addon_premium")),
        assigned_agent_id=row.get("assigned_agent_id"),
        participants=participants,
        latest_receipt_date=_optional_text(row.get("latest_receipt_date")),
        date_created=parse_timestamp(row.get("date_created")),
        last_updated=parse_timestamp(row.get("last_updated")),
    )


def payment_from_row(row: dict[str, Any]) -> Payment:
    """Build a Payment from a ``payments`` row."""
    return Payment(
        payment_id=row.get("id"),
        customer_id=row["customer_id"],
        policy_number=_text(row.get("policy_number")),
        payment_amount=to_decimal(row.get("payment_amount")),
        payment_date=_optional_text(row.get("payment_date")),
        payment_period=_text(row.get("payment_period")) or "Monthly",
        payment_method=_text(row.get("payment_method")) or "Cash",
        receipt_filename=_optional_text(row.get("receipt_filename")),
        recorded_by_agent_id=row.get("recorded_by_agent_id"),
        is_legacy_receipt=bool(row.get("is_legacy_receipt", False)),
        legacy_receipt_notes=_optional_text(row.get("legacy_receipt_notes")),
    )


CUSTOMER_COLUMNS = [
    "id", "policy_number", "first_name", "surname", "id_number",
    "date_of_birth", "gender", "phone", "email", "street_address", "town",
    "postal_address", "funeral_package", "status", "inception_date",
    "cover_date", "premium_period", "total_premium", "policy_premium",
    "addon_premium", "assigned_agent_id", "latest_receipt_date",
    "date_created", "last_updated",
]


def customer_to_row(customer: Customer, embed_participants: bool = True) -> dict[str, Any]:
    """Serialize a Customer to a ``customers`` row.

    With ``embed_participants`` the row carries the legacy embedded
    camelCase ``participants`` list.
    """
    row = {
        "id": customer.customer_id,
        "policy_number": customer.policy_number,
        "first_name": customer.first_name,
        "surname": customer.surname,
        "id_number": customer.id_number,
        "date_of_birth": customer.date_of_birth,
        "gender": customer.gender,
        "phone": customer.phone,
        "email": customer.email,
        "street_address": customer.street_address,
        "town": customer.town,
        "postal_address": customer.postal_address,
        "funeral_package": customer.funeral_package,
        "status": customer.status.value,
        "inception_date": customer.inception_date,
        "cover_date": customer.cover_date,
        "premium_period": customer.premium_period,
        "total_premium": customer.total_premium,
        "policy_premium": customer.policy_premium,
        "addon_premium": customer.addon_premium,
        "assigned_agent_id": customer.assigned_agent_id,
        "latest_receipt_date": customer.latest_receipt_date,
        "date_created": customer.date_created,
        "last_updated": customer.last_updated,
    }
    if embed_participants:
        row["participants"] = [participant_to_dict(p) for p in customer.participants]
    return row
