"""Reward spin wheel: weighted prize draw, daily spin budgets and rotation targeting."""

__version__ = "0.1.0"
