"""Schach: chess rules, game state and a computer opponent."""

__version__ = "0.1.0"
