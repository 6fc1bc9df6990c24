"""Impot Sim - household income tax simulator."""

__version__ = "0.3.0"
