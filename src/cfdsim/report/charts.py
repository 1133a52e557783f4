"""PNG chart rendering for sweep results.

Two charts share the same price labels: unrealized profit/loss as a filled
line, and cumulative position as bars. Rendering uses the non-interactive
Agg backend so it works headless.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.ticker import FuncFormatter, MultipleLocator  # noqa: E402

from cfdsim.report.formatter import ChartSeries, ResultFormatter  # noqa: E402

if TYPE_CHECKING:
    from cfdsim.contracts import ResultSet

PROFIT_CHART_FILENAME = "profit_loss.png"
POSITION_CHART_FILENAME = "position.png"

LINE_COLOR = "#3498db"
BAR_COLOR = "#27ae60"
BAR_EDGE_COLOR = "#229954"


def _money_ticks(suffix: str) -> FuncFormatter:
    return FuncFormatter(lambda value, _pos: f"{int(round(value)):,}{suffix}")


def render_profit_chart(series: ChartSeries, output_path: Path, suffix: str) -> None:
    """Render the profit/loss line chart."""
    fig, ax = plt.subplots(figsize=(10, 4))
    try:
        x = range(len(series.labels))
        ax.plot(x, series.profit_loss, color=LINE_COLOR, linewidth=2, label="Profit/Loss")
        ax.fill_between(x, series.profit_loss, color=LINE_COLOR, alpha=0.1)
        ax.set_xticks(list(x), series.labels, rotation=45, ha="right")
        ax.yaxis.set_major_formatter(_money_ticks(suffix))
        ax.set_title("Unrealized Profit/Loss")
        ax.set_xlabel("Price")
        ax.legend()
        fig.tight_layout()
        fig.savefig(output_path)
    finally:
        plt.close(fig)


def render_position_chart(series: ChartSeries, output_path: Path) -> None:
    """Render the cumulative position bar chart."""
    fig, ax = plt.subplots(figsize=(10, 4))
    try:
        x = range(len(series.labels))
        ax.bar(
            x,
            series.positions,
            color=BAR_COLOR,
            edgecolor=BAR_EDGE_COLOR,
            linewidth=1,
            label="Total Position",
        )
        ax.set_xticks(list(x), series.labels, rotation=45, ha="right")
        ax.set_ylim(bottom=0)
        if max(series.positions, default=0) <= 2:
            ax.yaxis.set_major_locator(MultipleLocator(0.1))
        ax.set_title("Cumulative Position")
        ax.set_xlabel("Price")
        ax.legend()
        fig.tight_layout()
        fig.savefig(output_path)
    finally:
        plt.close(fig)


def render_charts(
    result: ResultSet,
    output_dir: Path,
    formatter: ResultFormatter | None = None,
) -> tuple[Path, Path]:
    """Render both charts as PNG files.

    Args:
        result: ResultSet from simulate().
        output_dir: Directory to write files to (created if missing).
        formatter: Formatter supplying series and currency suffix.

    Returns:
        Tuple of (profit_chart_path, position_chart_path).
    """
    formatter = formatter or ResultFormatter()
    series = formatter.chart_series(result)
    output_dir.mkdir(parents=True, exist_ok=True)

    profit_path = output_dir / PROFIT_CHART_FILENAME
    position_path = output_dir / POSITION_CHART_FILENAME
    render_profit_chart(series, profit_path, formatter.currency_suffix)
    render_position_chart(series, position_path)
    return profit_path, position_path
