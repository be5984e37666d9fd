"""Policy portfolio scenario with injected data-quality defects."""

import logging
import random
from dataclasses import replace
from datetime import date, timedelta
from typing import Any

from stone_river.engines.compliance import months_between
from stone_river.engines.suffix import categorize
from stone_river.generators import CustomerGenerator, PaymentGenerator
from stone_river.models.policy import Customer, ParticipantCategory, PolicyStatus
from stone_river.store.policy import PolicyDataStore

logger = logging.getLogger(__name__)


class PortfolioScenario:
    """Generate a portfolio resembling a legacy spreadsheet import.

    Clean customers are generated first, then defects are injected at the
    configured rates so every batch job has something to find:

    - principals dropped from the participant list
    - suffixes scrambled into the wrong band
    - customers re-imported under a new policy number (duplicate id number)
    - inception dates written in a non-standard format
    - payment histories with missed months
    - a few Cancelled and Express accounts
    """

    DATE_FORMATS = ["%m/%d/%Y", "%d-%m-%Y", "%B %d, %Y", "%Y-%m-%dT00:00:00Z"]

    def __init__(
        self,
        num_customers: int = 100,
        missing_principal_rate: float = 0.15,
        wrong_suffix_rate: float = 0.10,
        duplicate_rate: float = 0.05,
        nonstandard_date_rate: float = 0.10,
        payment_gap_rate: float = 0.30,
        sticky_rate: float = 0.05,
        today: date | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize portfolio scenario.

        Parameters
        ----------
        num_customers : int
            Number of distinct policy holders.
        missing_principal_rate : float
            Share of customers whose principal participant is removed.
        wrong_suffix_rate : float
            Share of customers with a scrambled suffix.
        duplicate_rate : float
            Share of customers re-imported as a duplicate record.
        nonstandard_date_rate : float
            Share of inception dates stored in a legacy format.
        payment_gap_rate : float
            Share of customers who missed one or more months.
        sticky_rate : float
            Share of customers marked Cancelled or Express.
        today : date | None
            Reference date for inception dates and payment histories.
        seed : int | None
            Random seed for reproducibility.
        """
        self.num_customers = num_customers
        self.missing_principal_rate = missing_principal_rate
        self.wrong_suffix_rate = wrong_suffix_rate
        self.duplicate_rate = duplicate_rate
        self.nonstandard_date_rate = nonstandard_date_rate
        self.payment_gap_rate = payment_gap_rate
        self.sticky_rate = sticky_rate
        self.today = today or date.today()
        self.seed = seed

        if seed is not None:
            random.seed(seed)

        self.store = PolicyDataStore()
        self._customer_gen = CustomerGenerator(seed=seed, today=self.today)
        self._payment_gen = PaymentGenerator(seed=seed)
        self._defects: dict[str, int] = {}

    def generate(self) -> PolicyDataStore:
        """Generate all data for the scenario.

        Returns
        -------
        PolicyDataStore
            Store containing customers and payments.
        """
        logger.info("Starting portfolio scenario: %d customers", self.num_customers)

        customers = list(self._customer_gen.generate_batch(self.num_customers))
        next_id = len(customers) + 1

        for customer in customers:
            months = max(0, months_between(date.fromisoformat(customer.inception_date), self.today))
            paid = months
            if random.random() < self.payment_gap_rate and months > 0:
                paid = max(0, months - random.randint(1, min(months, 6)))
                self._count("payment_gaps")
            payments = self._payment_gen.generate_history(customer, paid)

            customer = self._inject(customer)
            self.store.add_customer(customer)
            self.store.add_payments(payments)

            if random.random() < self.duplicate_rate:
                self.store.add_customer(self._duplicate(customer, next_id))
                next_id += 1
                self._count("duplicates")

        logger.info(
            "Generated portfolio: %d customers, %d payments, defects=%s",
            len(self.store.customers),
            len(self.store.payments),
            self._defects,
        )
        return self.store

    def _count(self, defect: str) -> None:
        self._defects[defect] = self._defects.get(defect, 0) + 1

    def _inject(self, customer: Customer) -> Customer:
        participants = list(customer.participants)

        if random.random() < self.missing_principal_rate:
            participants = [
                p for p in participants
                if categorize(p.relationship) is not ParticipantCategory.PRINCIPAL
            ]
            self._count("missing_principals")

        if len(participants) > 1 and random.random() < self.wrong_suffix_rate:
            index = random.randrange(len(participants))
            wrong = random.choice(["150", "250", "350", "999", "12", ""])
            participants[index] = replace(participants[index], suffix=wrong or None)
            self._count("wrong_suffixes")

        inception = customer.inception_date
        if random.random() < self.nonstandard_date_rate:
            fmt = random.choice(self.DATE_FORMATS)
            inception = date.fromisoformat(inception).strftime(fmt)
            self._count("nonstandard_dates")

        status = customer.status
        if random.random() < self.sticky_rate:
            status = random.choice([PolicyStatus.CANCELLED, PolicyStatus.EXPRESS])
            self._count("sticky_statuses")

        return replace(customer, participants=participants, inception_date=inception, status=status)

    def _duplicate(self, customer: Customer, customer_id: int) -> Customer:
        """Re-import of a customer: same id number, fewer details, older timestamps."""
        created = customer.date_created - timedelta(days=random.randint(30, 400))
        return replace(
            customer,
            customer_id=customer_id,
            policy_number=f"SR{customer_id:06d}",
            id_number=customer.id_number.replace("-", ""),
            email="",
            postal_address="",
            participants=customer.participants[:1],
            date_created=created,
            last_updated=None if random.random() < 0.5 else created,
        )

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics for the generated data.

        Returns
        -------
        dict[str, Any]
            Store counts plus the number of each injected defect.
        """
        return {**self.store.summary(), "defects": dict(self._defects)}
