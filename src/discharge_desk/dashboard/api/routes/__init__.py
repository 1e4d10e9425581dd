"""API route modules."""

from discharge_desk.dashboard.api.routes import discharges, health

__all__ = ["discharges", "health"]
