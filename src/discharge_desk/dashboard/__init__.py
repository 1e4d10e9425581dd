"""Discharge approval dashboard: decision board and HTTP API."""
