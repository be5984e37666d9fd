"""Base generator class for synthetic policy data."""

from __future__ import annotations

import random
from abc import ABC
from datetime import date

from faker import Faker


class BaseGenerator(ABC):
    """Base class for policy data generators.

    Holds the Faker instance, seeds both Faker and ``random`` so a portfolio
    can be regenerated exactly, and pins the reference date that inception
    dates and payment histories are laid out against.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    today : date | None
        Reference date (defaults to the current date).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        today: date | None = None,
    ) -> None:
        self.fake = Faker(locale)
        self.today = today or date.today()
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    @staticmethod
    def shift_month(start: date, months: int) -> date:
        """First day of the month ``months`` after ``start``; negative goes back."""
        year, month = divmod(start.year * 12 + start.month - 1 + months, 12)
        return date(year, month + 1, 1)
