"""
Report aggregations over the cleaned sales table.

Every function is read-only: it takes the cleaned DataFrame and returns a new,
small DataFrame that one chart renders. An empty cleaned table yields empty
frames with the same columns.
"""

import numpy as np
import pandas as pd
from sales_insights.logger import setup_logger

logger = setup_logger("etl.aggregate")

# Price bins over price_usd; the lowest edge is inclusive so $0 lands in "$0-50"
PRICE_BIN_EDGES = [0, 50, 100, 150, 200, 250, 300, np.inf]
PRICE_BIN_LABELS = [
    "$0-50",
    "$50-100",
    "$100-150",
    "$150-200",
    "$200-250",
    "$250-300",
    "$300+",
]

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _total_sales_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    return (
        df.groupby(column)["sales"]
        .sum()
        .reset_index(name="total_sales")
        .sort_values("total_sales", ascending=False, ignore_index=True)
    )


def _total_units_by(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    return (
        df.groupby(columns, observed=True)["units_sold"]
        .sum()
        .reset_index(name="total_units")
    )


def _month_start(order_date: pd.Series) -> pd.Series:
    return order_date.dt.to_period("M").dt.to_timestamp()


# --------------------------------------------------
# Phase 1: market performance
# --------------------------------------------------

def sales_by_product_line(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per product line, largest first."""
    return _total_sales_by(df, "product_line")


def sales_by_category(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per product category with each category's share of the total."""
    category_sales = _total_sales_by(df, "product_category")
    grand_total = category_sales["total_sales"].sum()
    if grand_total:
        category_sales["percentage"] = category_sales["total_sales"] / grand_total * 100
    else:
        category_sales["percentage"] = 0.0
    return category_sales


def sales_by_region(df: pd.DataFrame) -> pd.DataFrame:
    return _total_sales_by(df, "region")


def sales_by_gender(df: pd.DataFrame) -> pd.DataFrame:
    return _total_sales_by(df, "gender_category")


def sales_by_channel(df: pd.DataFrame) -> pd.DataFrame:
    return _total_sales_by(df, "sales_channel")


# --------------------------------------------------
# Phase 2: channel strategy
# --------------------------------------------------

def units_by_channel_and_category(df: pd.DataFrame) -> pd.DataFrame:
    """Units sold per (sales channel, product category) pair."""
    return _total_units_by(df, ["sales_channel", "product_category"])


def monthly_channel_units(df: pd.DataFrame) -> pd.DataFrame:
    """Units sold per calendar month and sales channel (month = first day)."""
    monthly = df.assign(month=_month_start(df["order_date"]))
    return (
        monthly.groupby(["month", "sales_channel"])["units_sold"]
        .sum()
        .reset_index(name="units")
    )


def monthly_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per calendar month (month = first day)."""
    monthly = df.assign(month=_month_start(df["order_date"]))
    return (
        monthly.groupby("month")["sales"]
        .sum()
        .reset_index(name="total_sales")
    )


# --------------------------------------------------
# Phase 3: seasonality and pricing
# --------------------------------------------------

def seasonal_units_by_category(df: pd.DataFrame) -> pd.DataFrame:
    """
    Units sold per month-of-year and product category, all years folded
    together. Only months with sales are returned, in calendar order.
    """
    month = pd.Categorical(
        df["order_date"].dt.month.map(lambda m: MONTH_LABELS[int(m) - 1]),
        categories=MONTH_LABELS,
        ordered=True,
    )
    seasonal = df.assign(month=month)
    return (
        seasonal.groupby(["month", "product_category"], observed=True)["units_sold"]
        .sum()
        .reset_index(name="total_units")
    )


def assign_price_bins(price_usd: pd.Series) -> pd.Series:
    """
    Bucket USD prices into PRICE_BIN_LABELS.

    Bins are right-closed with the lowest edge included:
    0 and 50 -> "$0-50", 50.01 -> "$50-100", anything above 300 -> "$300+".
    Negative prices fall outside every bin.
    """
    return pd.cut(
        price_usd,
        bins=PRICE_BIN_EDGES,
        labels=PRICE_BIN_LABELS,
        right=True,
        include_lowest=True,
    )


def units_by_price_bin(df: pd.DataFrame, category: str) -> pd.DataFrame:
    """
    Units sold per price bin for one product category.

    All bins are returned, empty ones with 0 units, so every category's
    chart shares the same x axis.
    """
    subset = df[df["product_category"] == category]
    binned = subset.assign(price_bin=assign_price_bins(subset["price_usd"]))
    result = (
        binned.groupby("price_bin", observed=False)["units_sold"]
        .sum()
        .reset_index(name="total_units")
    )
    result["total_units"] = result["total_units"].astype("int64")
    return result


# --------------------------------------------------
# Phase 4: customers and regions
# --------------------------------------------------

def units_by_gender_and_category(df: pd.DataFrame) -> pd.DataFrame:
    return _total_units_by(df, ["gender_category", "product_category"])


def regional_positioning(df: pd.DataFrame) -> pd.DataFrame:
    """Average USD price, total sales and total units per region."""
    return (
        df.groupby("region")
        .agg(
            avg_price=("price_usd", "mean"),
            total_sales=("sales", "sum"),
            total_units=("units_sold", "sum"),
        )
        .reset_index()
    )


def build_aggregations(df: pd.DataFrame) -> dict[str, pd.DataFrame]:
    """
    Compute every aggregation the report needs, keyed by chart name.
    """
    logger.info(f"Building report aggregations from {len(df)} cleaned records")

    aggregations = {
        "product_line_performance": sales_by_product_line(df),
        "product_category_mix": sales_by_category(df),
        "regional_performance": sales_by_region(df),
        "customer_demographics": sales_by_gender(df),
        "channel_effectiveness": sales_by_channel(df),
        "channel_product_fit": units_by_channel_and_category(df),
        "channel_trends_units": monthly_channel_units(df),
        "channel_trends_sales": monthly_sales(df),
        "seasonal_patterns": seasonal_units_by_category(df),
        "price_bins_apparel": units_by_price_bin(df, "Apparel"),
        "price_bins_footwear": units_by_price_bin(df, "Footwear"),
        "gender_by_category": units_by_gender_and_category(df),
        "regional_positioning": regional_positioning(df),
    }

    logger.info(f"Built {len(aggregations)} aggregations")
    return aggregations
