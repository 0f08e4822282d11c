"""Spot market signal scanner with OCO bracket execution."""

__version__ = "0.1.0"
