"""Domain models for policy administration."""

from stone_river.models.base import Event

__all__ = ["Event"]
