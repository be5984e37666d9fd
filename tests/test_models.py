"""Tests for policy models, enums and row conversion."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from stone_river.models.policy import (
    STICKY_STATUSES,
    ParticipantCategory,
    PolicyStatus,
    PremiumPeriod,
    Relationship,
)
from stone_river.models.policy.records import (
    CUSTOMER_COLUMNS,
    customer_from_row,
    customer_to_row,
    participant_from_dict,
    participant_to_dict,
    payment_from_row,
    to_decimal,
)


class TestPolicyStatus:
    """Tests for PolicyStatus."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Active", PolicyStatus.ACTIVE),
            ("suspended", PolicyStatus.SUSPENDED),
            (" Grace Period ", PolicyStatus.GRACE_PERIOD),
            (PolicyStatus.EXPRESS, PolicyStatus.EXPRESS),
            ("Pending", PolicyStatus.INACTIVE),
            (None, PolicyStatus.INACTIVE),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert PolicyStatus.parse(raw) is expected

    def test_sticky(self) -> None:
        assert STICKY_STATUSES == {PolicyStatus.CANCELLED, PolicyStatus.EXPRESS}
        assert PolicyStatus.CANCELLED.is_sticky
        assert not PolicyStatus.SUSPENDED.is_sticky

    def test_string_value(self) -> None:
        assert PolicyStatus.GRACE_PERIOD == "Grace Period"


class TestRelationship:
    """Tests for Relationship parsing."""

    def test_parse(self) -> None:
        assert Relationship.parse("principal  MEMBER") is Relationship.PRINCIPAL_MEMBER
        assert Relationship.parse("Aunt") is Relationship.OTHER
        assert Relationship.parse(None) is Relationship.OTHER


class TestParticipantCategory:
    """Tests for ParticipantCategory."""

    @pytest.mark.parametrize(
        "category,base,band,label",
        [
            (ParticipantCategory.PRINCIPAL, 0, (0, 0), "Principal"),
            (ParticipantCategory.SPOUSE, 101, (101, 199), "Spouse"),
            (ParticipantCategory.CHILD, 201, (201, 299), "Child"),
            (ParticipantCategory.DEPENDENT, 301, (301, 399), "Dependent"),
        ],
    )
    def test_bands(self, category, base, band, label) -> None:
        assert category.base == base
        assert category.band == band
        assert category.label == label


class TestPremiumPeriod:
    """Tests for PremiumPeriod parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Monthly", PremiumPeriod.MONTHLY),
            ("quarter", PremiumPeriod.QUARTERLY),
            ("Yearly", PremiumPeriod.ANNUALLY),
            ("", PremiumPeriod.MONTHLY),
            (None, PremiumPeriod.MONTHLY),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert PremiumPeriod.parse(raw) is expected


class TestCustomer:
    """Tests for the Customer model."""

    def test_full_name(self, make_customer) -> None:
        assert make_customer(first_name="Rudo", surname="Ncube").full_name == "Rudo Ncube"

    def test_defaults(self, make_customer) -> None:
        customer = make_customer()
        assert customer.participants == []
        assert customer.premium_period == "Monthly"
        assert customer.last_updated is None


class TestRecords:
    """Tests for row and JSON conversion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, Decimal("0")),
            ("", Decimal("0")),
            ("12.50", Decimal("12.50")),
            (7, Decimal("7")),
            (Decimal("3.10"), Decimal("3.10")),
            ("twelve", Decimal("0")),
        ],
    )
    def test_to_decimal(self, raw, expected) -> None:
        assert to_decimal(raw) == expected

    def test_participant_from_camel_case(self) -> None:
        participant = participant_from_dict({
            "firstName": "Farai",
            "surname": "Moyo",
            "relationship": "Spouse",
            "dateOfBirth": "1985-02-03",
            "idNumber": "63-2B11",
            "suffix": "101",
            "medicalPackage": "ZimHealth",
            "isStudent": False,
        })

        assert participant.first_name == "Farai"
        assert participant.date_of_birth == "1985-02-03"
        assert participant.id_number == "63-2B11"
        assert participant.medical_package == "ZimHealth"
        assert participant.suffix == "101"

    def test_participant_from_snake_case_row(self) -> None:
        participant = participant_from_dict({
            "participant_id": 12,
            "first_name": "Tariro",
            "surname": "Moyo",
            "relationship": "Child",
            "date_of_birth": date(2015, 6, 1),
            "suffix": "201",
            "sort_key": 2,
        })

        assert participant.participant_id == 12
        assert participant.date_of_birth == "2015-06-01"
        assert participant.sort_key == 2

    def test_participant_type_fallback(self) -> None:
        """Test legacy rows carrying participantType instead of relationship."""
        participant = participant_from_dict({"firstName": "Chipo", "participantType": "Child"})
        assert participant.relationship == "Child"
        assert participant.suffix is None

    def test_participant_garbage_tolerated(self) -> None:
        participant = participant_from_dict({})
        assert participant.first_name == ""
        assert participant.relationship == ""

    def test_participant_to_dict(self, make_participant) -> None:
        data = participant_to_dict(make_participant("Farai", "Spouse", "101", is_student=True))
        assert data["firstName"] == "Farai"
        assert data["suffix"] == "101"
        assert data["isStudent"] is True
        assert participant_from_dict(data).first_name == "Farai"

    def test_customer_from_row(self) -> None:
        customer = customer_from_row({
            "id": 4,
            "policy_number": "SR000004",
            "first_name": "Tendai",
            "surname": "Moyo",
            "status": "overdue",
            "inception_date": "2024-01-01",
            "total_premium": "15.00",
            "premium_period": None,
            "last_updated": "2024-03-01T10:00:00.000Z",
            "participants": [{"firstName": "Tendai", "relationship": "Self", "suffix": "000"}],
        })

        assert customer.customer_id == 4
        assert customer.status is PolicyStatus.OVERDUE
        assert customer.total_premium == Decimal("15.00")
        assert customer.premium_period == "Monthly"
        assert customer.last_updated == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
        assert customer.date_created is None
        assert [p.suffix for p in customer.participants] == ["000"]

    def test_customer_to_row(self, make_customer, make_participant) -> None:
        customer = make_customer(participants=[make_participant("Tendai", "Self", "000")])

        row = customer_to_row(customer)

        assert row["id"] == 1
        assert row["status"] == "Active"
        assert row["participants"][0]["suffix"] == "000"
        assert set(CUSTOMER_COLUMNS) <= set(row)
        assert "participants" not in customer_to_row(customer, embed_participants=False)

    def test_payment_from_row(self) -> None:
        payment = payment_from_row({
            "id": 9,
            "customer_id": 4,
            "policy_number": "SR000004",
            "payment_amount": Decimal("15.00"),
            "payment_date": date(2024, 2, 5),
            "payment_method": None,
        })

        assert payment.payment_id == 9
        assert payment.payment_date == "2024-02-05"
        assert payment.payment_method == "Cash"
        assert payment.payment_period == "Monthly"
