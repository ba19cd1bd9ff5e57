"""Workout log analytics: trends, rep-max estimates and progress charts."""

__version__ = "0.1.0"
