"""
ResultSet formatter.

Deterministic, template-based views of a sweep result: the final summary,
one table row per sampled price, and the series behind the profit/loss line
chart and the cumulative position bar chart. Money is rounded to whole
units with thousands separators and a currency suffix; positions keep one
decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from cfdsim.contracts.base import quantize_position, round_to_whole

if TYPE_CHECKING:
    from cfdsim.contracts import ResultRow, ResultSet

DEFAULT_CURRENCY_SUFFIX = "円"

PROFIT_CLASS = "profit-positive"
LOSS_CLASS = "profit-negative"

TABLE_HEADERS = ("Price", "Total Position", "Average Price", "Profit/Loss")


def format_number(value: Decimal | int) -> str:
    """Round to a whole number and add thousands separators."""
    return f"{round_to_whole(Decimal(value)):,}"


def format_money(value: Decimal | int, suffix: str = DEFAULT_CURRENCY_SUFFIX) -> str:
    """Format a price or money value, e.g. ``42,883円``."""
    return f"{format_number(value)}{suffix}"


def format_position(value: Decimal) -> str:
    """Format a position with exactly one decimal, e.g. ``10.2``."""
    return str(quantize_position(value))


@dataclass(frozen=True)
class Summary:
    """Final-row summary."""

    total_position: str
    average_price: str
    profit_loss: str
    is_loss: bool


@dataclass(frozen=True)
class TableRow:
    """One formatted table row."""

    price: str
    total_position: str
    average_price: str
    profit_loss: str
    css_class: str  # PROFIT_CLASS or LOSS_CLASS


@dataclass(frozen=True)
class ChartSeries:
    """Data behind both charts, keyed by the same price labels."""

    labels: list[str]
    profit_loss: list[int]
    positions: list[float]


class ResultFormatter:
    """
    Formatter for ResultSet objects.

    Produces the summary, table and chart series the presentation layer
    renders, plus a plain-text report for terminals.
    """

    def __init__(self, currency_suffix: str = DEFAULT_CURRENCY_SUFFIX) -> None:
        self._suffix = currency_suffix

    @property
    def currency_suffix(self) -> str:
        return self._suffix

    def summary(self, result: ResultSet) -> Summary:
        """Summarise the final row."""
        final = result.final
        return Summary(
            total_position=format_position(final.total_position),
            average_price=format_money(final.average_price, self._suffix),
            profit_loss=format_money(final.profit_loss, self._suffix),
            is_loss=final.profit_loss < 0,
        )

    def table_row(self, row: ResultRow) -> TableRow:
        """Format a single result row."""
        return TableRow(
            price=format_money(row.price, self._suffix),
            total_position=format_position(row.total_position),
            average_price=format_money(row.average_price, self._suffix),
            profit_loss=format_money(row.profit_loss, self._suffix),
            css_class=PROFIT_CLASS if row.profit_loss >= 0 else LOSS_CLASS,
        )

    def table(self, result: ResultSet) -> list[TableRow]:
        """Format every result row."""
        return [self.table_row(row) for row in result.rows]

    def chart_series(self, result: ResultSet) -> ChartSeries:
        """Build chart data: price labels, rounded P/L, one-decimal positions."""
        return ChartSeries(
            labels=[format_number(row.price) for row in result.rows],
            profit_loss=[round_to_whole(row.profit_loss) for row in result.rows],
            positions=[float(quantize_position(row.total_position)) for row in result.rows],
        )

    def render_text(self, result: ResultSet) -> str:
        """Render summary and table as aligned plain text."""
        summary = self.summary(result)
        lines = [
            "=== SIMULATION SUMMARY ===",
            f"  Direction: {result.parameters.direction.value}",
            f"  Final Total Position: {summary.total_position}",
            f"  Final Average Price: {summary.average_price}",
            f"  Final Profit/Loss: {summary.profit_loss}",
            "",
        ]

        cells = [TABLE_HEADERS] + [
            (r.price, r.total_position, r.average_price, r.profit_loss)
            for r in self.table(result)
        ]
        widths = [max(len(row[i]) for row in cells) for i in range(len(TABLE_HEADERS))]
        for row in cells:
            lines.append("  ".join(cell.rjust(width) for cell, width in zip(row, widths)))

        return "\n".join(lines)
