"""Export and formatting of trend reports."""

from bodytrend.export.formatters import export_series_csv, format_report

__all__ = ["export_series_csv", "format_report"]
