"""Tests for synthetic data generators and the portfolio scenario."""

import re
from datetime import date

import pytest

from stone_river.engines.compliance import evaluate_arrears
from stone_river.engines.duplicates import find_duplicate_groups
from stone_river.engines.suffix import is_compliant
from stone_river.generators import CustomerGenerator, ParticipantGenerator, PaymentGenerator
from stone_river.generators.base import BaseGenerator
from stone_river.generators.policy import generate_id_number
from stone_river.models.policy import PolicyStatus, Relationship
from stone_river.scenarios import PortfolioScenario


class TestBaseGenerator:
    """Tests for BaseGenerator helpers."""

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2024, 4, 15), 0, date(2024, 4, 1)),
            (date(2024, 4, 15), -4, date(2023, 12, 1)),
            (date(2023, 11, 30), 3, date(2024, 2, 1)),
            (date(2024, 1, 1), -36, date(2021, 1, 1)),
        ],
    )
    def test_shift_month(self, start, months, expected) -> None:
        assert BaseGenerator.shift_month(start, months) == expected

    def test_today_default(self) -> None:
        assert ParticipantGenerator().today == date.today()


class TestParticipantGenerator:
    """Tests for ParticipantGenerator."""

    def test_generate(self, seed) -> None:
        participant = ParticipantGenerator(seed=seed).generate(Relationship.SPOUSE, "Moyo")

        assert participant.relationship == "Spouse"
        assert participant.uuid
        assert participant.suffix is None
        assert participant.gender in ("Male", "Female")

    def test_family_excludes_principal(self, seed) -> None:
        family = ParticipantGenerator(seed=seed).generate_family(
            "Moyo", spouses=(1, 1), children=(3, 3), dependents=(1, 1)
        )
        assert len(family) == 5
        assert "Self" not in {p.relationship for p in family}

    def test_id_number_shape(self, seed) -> None:
        assert re.fullmatch(r"\d{2}-\d{6,7}[A-Z]\d{2}", generate_id_number())


class TestCustomerGenerator:
    """Tests for CustomerGenerator."""

    def test_generate(self, seed, today) -> None:
        customer = CustomerGenerator(seed=seed, today=today).generate()

        assert customer.customer_id == 1
        assert customer.policy_number == "SR000001"
        assert customer.status is PolicyStatus.ACTIVE
        assert customer.total_premium == customer.policy_premium + customer.addon_premium
        inception = date.fromisoformat(customer.inception_date)
        assert inception.day == 1
        assert inception <= today

    def test_participants_are_compliant(self, seed, today) -> None:
        for customer in CustomerGenerator(seed=seed, today=today).generate_batch(20):
            assert is_compliant(customer.participants)
            assert customer.participants[0].suffix == "000"

    def test_sequential_ids(self, seed) -> None:
        ids = [c.customer_id for c in CustomerGenerator(seed=seed).generate_batch(3)]
        assert ids == [1, 2, 3]

    def test_seed_reproducibility(self, seed, today) -> None:
        first = CustomerGenerator(seed=seed, today=today).generate()
        second = CustomerGenerator(seed=seed, today=today).generate()
        assert first.first_name == second.first_name
        assert first.id_number == second.id_number


class TestPaymentGenerator:
    """Tests for PaymentGenerator."""

    def test_history(self, seed, today) -> None:
        customer = CustomerGenerator(seed=seed, today=today).generate()
        payments = PaymentGenerator(seed=seed).generate_history(customer, 3)

        assert len(payments) == 3
        assert all(p.payment_amount == customer.total_premium for p in payments)
        months = [p.payment_date[:7] for p in payments]
        assert months == sorted(set(months))

    def test_full_history_is_active(self, make_customer, seed, today) -> None:
        customer = make_customer(inception_date="2024-01-01")
        payments = PaymentGenerator(seed=seed).generate_history(customer, 3)
        assert evaluate_arrears(customer, payments, today).status is PolicyStatus.ACTIVE


class TestPortfolioScenario:
    """Tests for PortfolioScenario."""

    def test_generate(self, seed, today) -> None:
        scenario = PortfolioScenario(num_customers=50, today=today, seed=seed)
        store = scenario.generate()

        summary = scenario.get_summary()
        assert summary["customers"] == len(store.customers)
        assert summary["customers"] >= 50
        assert summary["payments"] == len(store.load_payments())
        assert "defects" in summary

    def test_clean_portfolio(self, seed, today) -> None:
        scenario = PortfolioScenario(
            num_customers=20,
            missing_principal_rate=0,
            wrong_suffix_rate=0,
            duplicate_rate=0,
            nonstandard_date_rate=0,
            payment_gap_rate=0,
            sticky_rate=0,
            today=today,
            seed=seed,
        )
        store = scenario.generate()
        payments = store.load_payments()

        assert scenario.get_summary()["defects"] == {}
        for customer in store.load_customers():
            assert is_compliant(customer.participants)
            own = [p for p in payments if p.customer_id == customer.customer_id]
            assert evaluate_arrears(customer, own, today).status is PolicyStatus.ACTIVE

    def test_every_defect(self, seed, today) -> None:
        scenario = PortfolioScenario(
            num_customers=10,
            missing_principal_rate=1,
            wrong_suffix_rate=0,
            duplicate_rate=1,
            nonstandard_date_rate=1,
            payment_gap_rate=0,
            sticky_rate=0,
            today=today,
            seed=seed,
        )
        store = scenario.generate()
        defects = scenario.get_summary()["defects"]

        assert defects["missing_principals"] == 10
        assert defects["duplicates"] == 10
        assert defects["nonstandard_dates"] == 10
        assert len(store.customers) == 20
        assert len(find_duplicate_groups(store.load_customers())) == 10
        assert not any(is_compliant(c.participants) for c in store.load_customers())
