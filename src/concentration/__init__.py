"""Concentration: a human vs. AI memory-matching card game."""

__version__ = "0.1.0"
