"""Generators for customers, participants and payments."""

from __future__ import annotations

import random
import string
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator

from stone_river.engines.suffix import assign_suffixes
from stone_river.generators.base import BaseGenerator
from stone_river.models.policy import (
    CashBackAddon,
    Customer,
    FuneralPackage,
    Gender,
    MedicalPackage,
    Participant,
    Payment,
    PaymentMethod,
    PolicyStatus,
    PremiumPeriod,
    Relationship,
)

TOWNS = ["Harare", "Bulawayo", "Mutare", "Gweru", "Kwekwe", "Masvingo", "Chitungwiza", "Marondera"]


def generate_id_number() -> str:
    """National id in the ``63-123456A78`` shape."""
    return (
        f"{random.randint(1, 99):02d}-{random.randint(100000, 9999999)}"
        f"{random.choice(string.ascii_uppercase)}{random.randint(10, 99)}"
    )


class ParticipantGenerator(BaseGenerator):
    """Generate dependents covered under a policy."""

    DEPENDENT_RELATIONSHIPS = [
        Relationship.SIBLING,
        Relationship.PARENT,
        Relationship.GRANDPARENT,
        Relationship.OTHER,
    ]
    CHILD_RELATIONSHIPS = [Relationship.CHILD, Relationship.STEPCHILD, Relationship.GRANDCHILD]
    CHILD_WEIGHTS = [0.80, 0.12, 0.08]

    def generate(self, relationship: Relationship, surname: str) -> Participant:
        """Generate one participant with the given relationship."""
        gender = random.choice(list(Gender))
        if relationship is Relationship.SPOUSE:
            age_range = (21, 70)
        elif relationship in self.CHILD_RELATIONSHIPS:
            age_range = (0, 25)
        else:
            age_range = (18, 90)
        dob = self.fake.date_of_birth(minimum_age=age_range[0], maximum_age=age_range[1])

        first_name = (
            self.fake.first_name_male() if gender is Gender.MALE else self.fake.first_name_female()
        )
        return Participant(
            first_name=first_name,
            surname=surname if random.random() < 0.85 else self.fake.last_name(),
            relationship=relationship.value,
            uuid=self.fake.uuid4(),
            date_of_birth=dob.isoformat(),
            id_number=generate_id_number() if age_range[0] >= 16 else "",
            gender=gender.value,
            medical_package=random.choice(list(MedicalPackage)).value,
            cash_back_addon=random.choice(list(CashBackAddon)).value,
            is_student=relationship in self.CHILD_RELATIONSHIPS and random.random() < 0.3,
        )

    def generate_family(
        self,
        surname: str,
        spouses: tuple[int, int] = (0, 1),
        children: tuple[int, int] = (0, 4),
        dependents: tuple[int, int] = (0, 2),
    ) -> list[Participant]:
        """Generate a family in arbitrary (non-canonical) order, principal excluded."""
        family = [self.generate(Relationship.SPOUSE, surname) for _ in range(random.randint(*spouses))]
        for _ in range(random.randint(*children)):
            relationship = random.choices(self.CHILD_RELATIONSHIPS, weights=self.CHILD_WEIGHTS, k=1)[0]
            family.append(self.generate(relationship, surname))
        for _ in range(random.randint(*dependents)):
            family.append(self.generate(random.choice(self.DEPENDENT_RELATIONSHIPS), surname))
        random.shuffle(family)
        return family


class CustomerGenerator(BaseGenerator):
    """Generate synthetic policy holders with suffixed participants."""

    PACKAGE_PREMIUMS = {
        FuneralPackage.LITE: Decimal("5.00"),
        FuneralPackage.STANDARD: Decimal("10.00"),
        FuneralPackage.PREMIUM: Decimal("20.00"),
    }
    PACKAGE_WEIGHTS = [0.45, 0.40, 0.15]

    def __init__(self, seed: int | None = None, today: date | None = None) -> None:
        super().__init__(seed, today=today)
        self._participant_gen = ParticipantGenerator(seed=seed, today=today)
        self._next_id = 1

    def generate(self) -> Customer:
        """Generate a single customer.

        Returns
        -------
        Customer
            Customer with a principal and a family carrying canonical suffixes.
        """
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[Customer]:
        """Generate multiple customers.

        Parameters
        ----------
        count : int
            Number of customers to generate.

        Yields
        ------
        Customer
            Generated customers.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> Customer:
        customer_id = self._next_id
        self._next_id += 1

        gender = random.choice(list(Gender))
        first_name = (
            self.fake.first_name_male() if gender is Gender.MALE else self.fake.first_name_female()
        )
        surname = self.fake.last_name()
        package = random.choices(list(FuneralPackage), weights=self.PACKAGE_WEIGHTS, k=1)[0]
        policy_premium = self.PACKAGE_PREMIUMS[package]
        addon_premium = Decimal(random.choice(["0.00", "0.00", "2.50", "5.00"]))

        # Inception on the first of a month within the last three years
        months_ago = random.randint(0, 36)
        inception = self.shift_month(self.today, -months_ago)
        created = datetime(inception.year, inception.month, 1, tzinfo=timezone.utc) - timedelta(
            days=random.randint(1, 20)
        )

        customer = Customer(
            customer_id=customer_id,
            policy_number=f"SR{customer_id:06d}",
            first_name=first_name,
            surname=surname,
            id_number=generate_id_number(),
            date_of_birth=self.fake.date_of_birth(minimum_age=18, maximum_age=80).isoformat(),
            gender=gender.value,
            phone=f"+2637{random.choice('13178')}{random.randint(1000000, 9999999)}",
            email=self.fake.email(),
            street_address=self.fake.street_address(),
            town=random.choice(TOWNS),
            postal_address=f"P.O. Box {random.randint(1, 9999)}",
            funeral_package=package.value,
            status=PolicyStatus.ACTIVE,
            inception_date=inception.isoformat(),
            cover_date=(inception + timedelta(days=90)).isoformat(),
            premium_period=PremiumPeriod.MONTHLY.value,
            total_premium=policy_premium + addon_premium,
            policy_premium=policy_premium,
            addon_premium=addon_premium,
            date_created=created,
            last_updated=created,
        )

        family = self._participant_gen.generate_family(surname)
        customer.participants = assign_suffixes(family, customer).participants
        return customer


class PaymentGenerator(BaseGenerator):
    """Generate monthly premium payment histories."""

    METHODS = list(PaymentMethod)
    METHOD_WEIGHTS = [0.40, 0.35, 0.10, 0.15]

    def generate(self, customer: Customer, payment_date: date) -> Payment:
        """Generate one payment for a customer on a given date."""
        return Payment(
            payment_id=None,
            customer_id=customer.customer_id,
            policy_number=customer.policy_number,
            payment_amount=customer.total_premium,
            payment_date=payment_date.isoformat(),
            payment_period=customer.premium_period,
            payment_method=random.choices(self.METHODS, weights=self.METHOD_WEIGHTS, k=1)[0].value,
            receipt_filename=f"receipt-{customer.policy_number}-{payment_date:%Y%m}.jpg",
        )

    def generate_history(self, customer: Customer, months_paid: int) -> list[Payment]:
        """One payment per month starting at the inception month.

        Parameters
        ----------
        customer : Customer
            Customer with a ``YYYY-MM-DD`` inception date.
        months_paid : int
            Number of consecutive monthly payments to generate.

        Returns
        -------
        list[Payment]
            Payments dated within the first week of each month.
        """
        start = date.fromisoformat(customer.inception_date)
        payments = []
        for offset in range(months_paid):
            month = self.shift_month(start, offset)
            payments.append(self.generate(customer, month.replace(day=random.randint(1, 7))))
        return payments
