"""Discharge Desk: ward discharge-approval workflow."""

__version__ = "1.0.0"
