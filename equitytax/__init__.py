"""Equity compensation tax estimator (China IIT, USD-priced grants)."""

__version__ = "0.1.0"
