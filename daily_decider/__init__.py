"""Daily Decider — multi-signal decision recommendation engine."""

__version__ = "2.1.0"
