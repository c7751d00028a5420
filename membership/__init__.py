"""Membership management service: dues ledger, statements and reports."""

__version__ = "0.1.0"
