"""Salary Calc - statutory contribution and salary form validation engine."""

__version__ = "0.1.0"
