"""Presentation helpers for sweep results.

Formatting (summary, table, chart series, plain text) lives in
``cfdsim.report.formatter``; PNG rendering with matplotlib lives in
``cfdsim.report.charts`` and is imported on demand.
"""

from cfdsim.report.formatter import (
    ChartSeries,
    ResultFormatter,
    Summary,
    TableRow,
    format_money,
    format_number,
    format_position,
)

__all__ = [
    "ChartSeries",
    "ResultFormatter",
    "Summary",
    "TableRow",
    "format_money",
    "format_number",
    "format_position",
]
