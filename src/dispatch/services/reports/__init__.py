"""Zone report services."""

from .zone_report import build_zone_report, export_zone_report_xlsx

__all__ = ["build_zone_report", "export_zone_report_xlsx"]
