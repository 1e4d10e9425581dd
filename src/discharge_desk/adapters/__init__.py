"""Adapters for Discharge Desk.

This package contains the infrastructure implementations of the domain ports.
"""
