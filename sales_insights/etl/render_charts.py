from __future__ import annotations

from pathlib import Path
from typing import Callable, Union

import pandas as pd

import matplotlib
matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.ticker import FuncFormatter

from sales_insights.etl.aggregate import MONTH_LABELS, PRICE_BIN_LABELS, build_aggregations
from sales_insights.logger import setup_logger

logger = setup_logger("etl.render_charts")


# Phase palettes: 1 blues, 2 purples, 3 pinks, 4 oranges
PHASE_COLORS = {
    1: "#0066CC",
    2: "#4A148C",
    3: "#AD1457",
    4: "#BF360C",
}
BAR_BLUE = "#00A9E0"
CATEGORY_BLUES = {"Footwear": "#0066CC", "Apparel": "#00BCD4"}
GENDER_BLUES = {"Men": "#0066CC", "Women": "#4FC3F7", "Kids": "#81D4FA"}
CHANNEL_BLUES = {"Online": "#00A9E0", "Retail": "#0066CC"}
CATEGORY_PURPLES = {"Footwear": "#4A148C", "Apparel": "#9C27B0"}
CHANNEL_PURPLES = {"Online": "#9C27B0", "Retail": "#4A148C"}
CATEGORY_PINKS = {"Apparel": "#E91E63", "Footwear": "#AD1457"}
GENDER_ORANGES = {"Men": "#BF360C", "Women": "#FF7043", "Kids": "#FFAB91"}
BUBBLE_GRADIENT = ["#FFF3E0", "#FFB74D", "#FF7043", "#E64A19", "#BF360C"]
FALLBACK_PALETTE = [
    "#4e79a7", "#f28e2b", "#e15759", "#76b7b2", "#59a14f",
    "#edc949", "#af7aa1", "#ff9da7", "#9c755f", "#bab0ab",
]

_dollars = FuncFormatter(lambda x, _: f"${x:,.0f}")
_comma = FuncFormatter(lambda x, _: f"{x:,.0f}")


def _colors_for(keys, mapping: dict[str, str]) -> list[str]:
    colors = []
    extra = iter(FALLBACK_PALETTE * (len(keys) // len(FALLBACK_PALETTE) + 1))
    for key in keys:
        colors.append(mapping.get(key) or next(extra))
    return colors


def _new_axes(figsize=(10, 6)):
    fig = plt.figure(figsize=figsize)
    fig.patch.set_facecolor("white")
    ax = fig.add_subplot(111)
    return fig, ax


def _apply_theme(ax, title: str, subtitle: str, phase: int, grid_axis: str = "both") -> None:
    accent = PHASE_COLORS[phase]
    ax.set_facecolor("#F8F9FA")
    ax.set_title(f"{title}\n", fontsize=18, fontweight="bold", color=accent, loc="left")
    ax.text(
        0, 1.02, subtitle,
        transform=ax.transAxes, fontsize=11, style="italic", color="#555555",
    )
    ax.xaxis.label.set_color(accent)
    ax.yaxis.label.set_color(accent)
    ax.xaxis.label.set_fontweight("bold")
    ax.yaxis.label.set_fontweight("bold")
    ax.tick_params(colors="#333333")
    if grid_axis != "none":
        ax.grid(True, axis=grid_axis, color="#E0E0E0")
    ax.set_axisbelow(True)
    for spine in ("top", "right"):
        ax.spines[spine].set_visible(False)


def _no_data(ax) -> None:
    ax.text(
        0.5, 0.5, "No data",
        transform=ax.transAxes, ha="center", va="center",
        fontsize=14, color="#555555",
    )
    ax.set_xticks([])
    ax.set_yticks([])


def _save(fig, output_dir: Path, name: str, dpi: int) -> Path:
    path = output_dir / f"{name}.png"
    fig.tight_layout()
    fig.savefig(path, format="png", dpi=dpi)
    plt.close(fig)
    return path


def _headroom(ax, values: pd.Series, axis: str = "x") -> None:
    top = float(values.max()) if len(values) else 0.0
    if top > 0:
        if axis == "x":
            ax.set_xlim(0, top * 1.15)
        else:
            ax.set_ylim(0, top * 1.15)


# --------------------------------------------------
# Phase 1: market performance (horizontal bars)
# --------------------------------------------------

def _sales_barh(
    data: pd.DataFrame,
    label_col: str,
    title: str,
    subtitle: str,
    ylabel: str,
    colors: dict[str, str] | None = None,
    show_values: bool = True,
    show_share: bool = False,
):
    fig, ax = _new_axes()
    _apply_theme(ax, title, subtitle, phase=1, grid_axis="x")
    ax.set_xlabel("Total Sales (USD)")
    ax.set_ylabel(ylabel)

    if data.empty:
        _no_data(ax)
        return fig

    # Smallest at the bottom so the largest bar sits on top
    ordered = data.sort_values("total_sales", ascending=True)
    labels = ordered[label_col].astype(str).tolist()
    bar_colors = _colors_for(labels, colors) if colors else BAR_BLUE
    bars = ax.barh(labels, ordered["total_sales"], color=bar_colors)
    ax.xaxis.set_major_formatter(_dollars)

    if show_values:
        for bar, (_, row) in zip(bars, ordered.iterrows()):
            text = f"${row['total_sales']:,.0f}"
            if show_share:
                text += f"\n{row['percentage']:.1f}%"
            ax.annotate(
                text,
                (bar.get_width(), bar.get_y() + bar.get_height() / 2),
                xytext=(4, 0), textcoords="offset points",
                va="center", fontsize=10, fontweight="bold", color="#333333",
            )
        _headroom(ax, ordered["total_sales"], axis="x")
    return fig


def plot_product_line_performance(data: pd.DataFrame):
    return _sales_barh(
        data, "product_line",
        title="Product Line Performance",
        subtitle="Which product lines drive our sales? | Phase 1: Market Performance",
        ylabel="Product Line",
        show_values=False,
    )


def plot_product_category_mix(data: pd.DataFrame):
    return _sales_barh(
        data, "product_category",
        title="Product Category Mix",
        subtitle="Footwear vs. Apparel: Understanding our portfolio balance | Phase 1",
        ylabel="Product Category",
        colors=CATEGORY_BLUES,
        show_share=True,
    )


def plot_regional_performance(data: pd.DataFrame):
    return _sales_barh(
        data, "region",
        title="Regional Performance",
        subtitle="Where are we winning geographically? | Phase 1: Market Performance",
        ylabel="Region",
    )


def plot_customer_demographics(data: pd.DataFrame):
    return _sales_barh(
        data, "gender_category",
        title="Customer Demographics",
        subtitle="Understanding who's buying: Men's, Women's, Kids | Phase 1",
        ylabel="Gender Category",
        colors=GENDER_BLUES,
    )


def plot_channel_effectiveness(data: pd.DataFrame):
    return _sales_barh(
        data, "sales_channel",
        title="Channel Effectiveness",
        subtitle="How are customers buying: Online vs. Retail? | Phase 1",
        ylabel="Sales Channel",
        colors=CHANNEL_BLUES,
    )


# --------------------------------------------------
# Grouped bars (Phase 2 channel fit, Phase 4 gender split)
# --------------------------------------------------

def _grouped_bars(
    data: pd.DataFrame,
    index_col: str,
    group_col: str,
    colors: dict[str, str],
    ax,
    show_values: bool,
) -> None:
    pivot = data.pivot_table(
        index=index_col, columns=group_col, values="total_units",
        aggfunc="sum", fill_value=0, observed=True,
    )
    groups = list(pivot.columns)
    positions = range(len(pivot.index))
    width = 0.8 / max(len(groups), 1)

    for i, group in enumerate(groups):
        offsets = [p - 0.4 + width * (i + 0.5) for p in positions]
        bars = ax.bar(
            offsets, pivot[group], width=width,
            color=_colors_for([group], colors)[0], label=str(group),
        )
        if show_values:
            for bar in bars:
                ax.annotate(
                    f"{bar.get_height():,.0f}",
                    (bar.get_x() + bar.get_width() / 2, bar.get_height()),
                    xytext=(0, 3), textcoords="offset points",
                    ha="center", fontsize=10, fontweight="bold", color="#333333",
                )

    ax.set_xticks(list(positions))
    ax.set_xticklabels([str(v) for v in pivot.index])
    ax.yaxis.set_major_formatter(_comma)
    ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.12), ncol=max(len(groups), 1), frameon=False)
    if show_values:
        _headroom(ax, pd.Series(pivot.to_numpy().ravel()), axis="y")


def plot_channel_product_fit(data: pd.DataFrame):
    fig, ax = _new_axes()
    _apply_theme(
        ax, "Channel-Product Fit",
        "Which channels work best for which products? | Phase 2: Channel Strategy",
        phase=2, grid_axis="y",
    )
    ax.set_xlabel("Sales Channel")
    ax.set_ylabel("Units Sold")
    if data.empty:
        _no_data(ax)
        return fig
    _grouped_bars(data, "sales_channel", "product_category", CATEGORY_PURPLES, ax, show_values=True)
    return fig


def plot_channel_trends(units: pd.DataFrame, sales: pd.DataFrame):
    """Monthly channel units (lines) over total monthly sales (grey bars, right axis)."""
    fig, ax = _new_axes(figsize=(12, 6))
    _apply_theme(
        ax, "Channel Performance & Total Sales Over Time",
        "Channel units (lines) + Total sales revenue (bars) | Phase 2",
        phase=2,
    )
    ax.set_xlabel("Month")
    ax.set_ylabel("Units Sold")
    if units.empty and sales.empty:
        _no_data(ax)
        return fig

    sales_ax = ax.twinx()
    sales_ax.bar(
        sales["month"], sales["total_sales"],
        width=25, color="#BDBDBD", alpha=0.6, zorder=0,
    )
    sales_ax.set_ylabel("Total Sales (USD)", fontweight="bold", color="#111111")
    sales_ax.yaxis.set_major_formatter(_dollars)
    sales_ax.spines["top"].set_visible(False)

    # Lines drawn on the left axis must sit above the bars on the twin axis
    ax.set_zorder(sales_ax.get_zorder() + 1)
    ax.patch.set_visible(False)

    for channel, channel_units in units.groupby("sales_channel"):
        channel_units = channel_units.sort_values("month")
        color = _colors_for([channel], CHANNEL_PURPLES)[0]
        ax.plot(
            channel_units["month"], channel_units["units"],
            color=color, linewidth=1.8, marker="o", markersize=6, label=str(channel),
        )

    ax.yaxis.set_major_formatter(_comma)
    ax.xaxis.set_major_locator(mdates.MonthLocator(interval=2))
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%b %Y"))
    for label in ax.get_xticklabels():
        label.set_rotation(45)
        label.set_horizontalalignment("right")
    ax.legend(title="Sales Channel", loc="upper center", bbox_to_anchor=(0.5, -0.2), ncol=2, frameon=False)
    return fig


# --------------------------------------------------
# Phase 3: seasonality and pricing
# --------------------------------------------------

def plot_seasonal_patterns(data: pd.DataFrame):
    fig, ax = _new_axes()
    _apply_theme(
        ax, "Seasonal Patterns by Product Category",
        "Which categories peak in which months? (All years combined) | Phase 3",
        phase=3,
    )
    ax.set_xlabel("Month")
    ax.set_ylabel("Total Units Sold")
    if data.empty:
        _no_data(ax)
        return fig

    for category, category_units in data.groupby("product_category"):
        positions = [MONTH_LABELS.index(str(m)) for m in category_units["month"]]
        ax.plot(
            positions, category_units["total_units"],
            color=_colors_for([category], CATEGORY_PINKS)[0],
            linewidth=1.8, marker="o", markersize=6, label=str(category),
        )

    ax.set_xticks(range(len(MONTH_LABELS)))
    ax.set_xticklabels(MONTH_LABELS, rotation=45, ha="right")
    ax.yaxis.set_major_formatter(_comma)
    ax.legend(title="Product Category", loc="upper center", bbox_to_anchor=(0.5, -0.15), ncol=2, frameon=False)
    return fig


def plot_price_bins(data: pd.DataFrame, category: str):
    fig, ax = _new_axes()
    _apply_theme(
        ax, f"Price Range vs Units Sold - {category}",
        f"Does price affect {category.lower()} sales volume? | Phase 3",
        phase=3,
    )
    ax.set_xlabel("Price Range (USD)")
    ax.set_ylabel("Total Units Sold")
    if data.empty or data["total_units"].sum() == 0:
        _no_data(ax)
        return fig

    positions = [PRICE_BIN_LABELS.index(str(b)) for b in data["price_bin"]]
    ax.scatter(
        positions, data["total_units"],
        s=120, alpha=0.8, color=_colors_for([category], CATEGORY_PINKS)[0],
    )
    ax.set_xticks(range(len(PRICE_BIN_LABELS)))
    ax.set_xticklabels(PRICE_BIN_LABELS, rotation=45, ha="right")
    ax.yaxis.set_major_formatter(_comma)
    return fig


# --------------------------------------------------
# Phase 4: customers and regions
# --------------------------------------------------

def plot_gender_by_category(data: pd.DataFrame):
    fig, ax = _new_axes()
    _apply_theme(
        ax, "Gender Performance by Product Category",
        "Which gender buys what? | Phase 4",
        phase=4,
    )
    ax.set_xlabel("Product Category")
    ax.set_ylabel("Total Units Sold")
    if data.empty:
        _no_data(ax)
        return fig
    _grouped_bars(data, "product_category", "gender_category", GENDER_ORANGES, ax, show_values=False)
    return fig


def plot_regional_positioning(data: pd.DataFrame):
    fig, ax = _new_axes(figsize=(12, 7))
    _apply_theme(
        ax, "Regional Market Positioning",
        "Premium vs Value Markets: Price × Sales × Volume | Phase 4",
        phase=4,
    )
    ax.set_xlabel("Average Price (USD)")
    ax.set_ylabel("Total Sales (USD)")
    if data.empty:
        _no_data(ax)
        return fig

    units = data["total_units"].astype(float)
    span = units.max() - units.min()
    scaled = (units - units.min()) / span if span else units * 0 + 0.5
    # Bubble area between roughly 8pt and 30pt diameter
    sizes = (8 + scaled * 22) ** 2

    cmap = LinearSegmentedColormap.from_list("regional_units", BUBBLE_GRADIENT)
    points = ax.scatter(
        data["avg_price"], data["total_sales"],
        s=sizes, c=units, cmap=cmap, alpha=0.8, edgecolors="#FF7043",
    )
    for _, row in data.iterrows():
        ax.annotate(
            str(row["region"]),
            (row["avg_price"], row["total_sales"]),
            xytext=(0, 14), textcoords="offset points",
            ha="center", fontsize=10, fontweight="bold", color="#8B0000",
        )

    colorbar = fig.colorbar(points, ax=ax)
    colorbar.set_label("Total Units Sold", fontweight="bold")
    colorbar.formatter = _comma
    colorbar.update_ticks()
    ax.xaxis.set_major_formatter(_dollars)
    ax.yaxis.set_major_formatter(_dollars)
    return fig


CHART_BUILDERS: dict[str, Callable[[dict[str, pd.DataFrame]], object]] = {
    "01_product_line_performance": lambda a: plot_product_line_performance(a["product_line_performance"]),
    "02_product_category_mix": lambda a: plot_product_category_mix(a["product_category_mix"]),
    "03_regional_performance": lambda a: plot_regional_performance(a["regional_performance"]),
    "04_customer_demographics": lambda a: plot_customer_demographics(a["customer_demographics"]),
    "05_channel_effectiveness": lambda a: plot_channel_effectiveness(a["channel_effectiveness"]),
    "06_channel_product_fit": lambda a: plot_channel_product_fit(a["channel_product_fit"]),
    "07_channel_trends": lambda a: plot_channel_trends(a["channel_trends_units"], a["channel_trends_sales"]),
    "08_seasonal_patterns": lambda a: plot_seasonal_patterns(a["seasonal_patterns"]),
    "09a_price_bins_apparel": lambda a: plot_price_bins(a["price_bins_apparel"], "Apparel"),
    "09b_price_bins_footwear": lambda a: plot_price_bins(a["price_bins_footwear"], "Footwear"),
    "10_gender_by_category": lambda a: plot_gender_by_category(a["gender_by_category"]),
    "11_regional_positioning": lambda a: plot_regional_positioning(a["regional_positioning"]),
}


def render_report(
    clean_df: pd.DataFrame,
    output_dir: Union[str, Path],
    dpi: int = 140,
) -> dict[str, Path]:
    """
    Aggregate the cleaned sales table and write every report chart as PNG.

    Returns a mapping of chart name to written file. Charts for an empty
    table are still written, with a "No data" placeholder.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Rendering {len(CHART_BUILDERS)} charts to {output_path}")

    aggregations = build_aggregations(clean_df)

    charts: dict[str, Path] = {}
    for name, build in CHART_BUILDERS.items():
        try:
            fig = build(aggregations)
        except Exception:
            plt.close("all")
            logger.error(f"Chart {name} failed to render", exc_info=True)
            raise
        charts[name] = _save(fig, output_path, name, dpi)
        logger.info(f"Wrote {charts[name]}")

    logger.info(f"Report complete: {len(charts)} charts written")
    return charts
