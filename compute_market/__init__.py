"""Compute Market: a ledger for trading compute capacity between providers and consumers."""

__version__ = "0.1.0"
