"""Scenarios for generating realistic policy portfolios."""

from stone_river.scenarios.portfolio import PortfolioScenario

__all__ = ["PortfolioScenario"]
