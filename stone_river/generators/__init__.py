"""Synthetic data generators for demos and tests."""

from stone_river.generators.policy import (
    CustomerGenerator,
    ParticipantGenerator,
    PaymentGenerator,
)

__all__ = ["CustomerGenerator", "ParticipantGenerator", "PaymentGenerator"]
