"""Route group exports."""

from . import areas, customers, health, reports, schedules

__all__ = ["areas", "customers", "health", "reports", "schedules"]
