"""Results table and c-index comparison chart for the performance view."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from models.combinations import ComparisonRecord, group_performance_data
from models.constants import DISEASE_COLORS

sns.set_style("whitegrid")

FIG_PERFORMANCE = "cindex_comparison.png"

NO_DATA_MESSAGE = "No data available for the selected criteria."
RESULTS_COLUMNS = ["Model", "Disease", "C-index", "95% CI"]

C_INDEX_LIMITS = (0.5, 1.0)
C_INDEX_TICKS = [0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
# Horizontal spacing between diseases sharing one model slot, in slot units.
DODGE_STEP = 0.13


def finalize_figure(fig: Figure, output_path: Path, show_plots: bool) -> Path:
    """Persist figure to disk and optionally show the interactive window."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    if show_plots:
        fig.show()
    else:
        plt.close(fig)
    return output_path


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def build_results_table(records: Sequence[ComparisonRecord]) -> pd.DataFrame:
    """Tabulate comparison records as Model / Disease / C-index / 95% CI strings."""

    rows = [
        {
            "Model": record.mapped_model_name,
            "Disease": record.disease_name,
            "C-index": _fmt(record.point_estimate),
            "95% CI": f"{_fmt(record.ci_lower)}–{_fmt(record.ci_upper)}",
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=RESULTS_COLUMNS)


def dodge_offsets(count: int, step: float = DODGE_STEP) -> list[float]:
    """Symmetric x offsets for ``count`` points sharing one model slot."""

    start = -(count - 1) * step / 2
    return [start + index * step for index in range(count)]


def build_performance_figure(records: Sequence[ComparisonRecord]) -> Figure:
    """
    Draw the c-index comparison chart.

    One x slot per canonical model (fewest add-ons first), one colored point
    with CI error bars per disease inside each slot, and a legend listing the
    diseases in canonical order.
    """
    by_model, by_disease = group_performance_data(records)
    models = list(by_model)

    fig, ax = plt.subplots(figsize=(max(8.0, 1.6 * len(models)), 6))
    if not records:
        ax.text(0.5, 0.5, NO_DATA_MESSAGE, ha="center", va="center", transform=ax.transAxes)
        ax.set_axis_off()
        return fig

    positions: dict[int, float] = {}
    for slot, items in enumerate(by_model.values()):
        for item, offset in zip(items, dodge_offsets(len(items))):
            positions[id(item)] = slot + offset

    for disease, items in by_disease.items():
        color = DISEASE_COLORS.get(disease, "#000000")
        xs = [positions[id(item)] for item in items]
        ys = [item.point_estimate for item in items]
        lower = [
            0.0 if math.isnan(item.ci_lower) else item.point_estimate - item.ci_lower
            for item in items
        ]
        upper = [
            0.0 if math.isnan(item.ci_upper) else item.ci_upper - item.point_estimate
            for item in items
        ]
        ax.errorbar(
            xs,
            ys,
            yerr=[lower, upper],
            fmt="o",
            color=color,
            ecolor=color,
            elinewidth=1.5,
            capsize=4,
            markersize=7,
            label=disease,
        )

    ax.set_xticks(range(len(models)))
    ax.set_xticklabels(models, rotation=45, ha="right")
    ax.set_xlim(-0.5, len(models) - 0.5)
    ax.set_ylim(*C_INDEX_LIMITS)
    ax.set_yticks(C_INDEX_TICKS)
    ax.set_ylabel("C-index", fontweight="bold")
    ax.grid(axis="y", linestyle="--", alpha=0.5)
    ax.grid(axis="x", visible=False)
    ax.legend(
        loc="lower center",
        bbox_to_anchor=(0.5, 1.02),
        ncol=min(len(by_disease), 3),
        frameon=False,
    )
    fig.tight_layout()
    return fig


def plot_performance_comparison(
    records: Sequence[ComparisonRecord], output_dir: Path, show_plots: bool
) -> Path:
    """Render the c-index comparison chart and save it to disk."""

    fig = build_performance_figure(records)
    return finalize_figure(fig, output_dir / FIG_PERFORMANCE, show_plots)
