import pandas as pd
from sales_insights.logger import setup_logger

logger = setup_logger("etl.transform")

# Source currency (INR) units per US dollar
INR_PER_USD = 88

# Financial columns from the export that are never used downstream
DROPPED_COLUMNS = ["revenue", "profit", "discount_applied"]

# Region spellings seen in the export ("Bangalore", "bengaluru", "Hyd", ...)
BENGALURU_PATTERN = r"^(?:beng|bang)"
HYDERABAD_PATTERN = r"^hyd"

# Shoe sizes are plain numbers (7, 8.5, 12); apparel sizes use S/M/L/XL/XXL
FOOTWEAR_SIZE_PATTERN = r"[0-9]+\.?[0-9]*"
APPAREL_SIZE_PATTERN = r"[smlx]"

# Year-month-day layouts are tried before any day-month-year layout, so an
# ambiguous value such as "2023/01/02" always resolves year first. Months may
# also be written as names ("15-Jan-2023", "2023 January 15").
DATE_LAYOUTS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y%m%d",
    "%Y-%b-%d",
    "%Y %b %d",
    "%Y-%B-%d",
    "%Y %B %d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d%m%Y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d-%B-%Y",
    "%d %B %Y",
)


def drop_irrelevant_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop revenue, profit and discount columns when present."""
    return df.drop(columns=DROPPED_COLUMNS, errors="ignore")


def normalize_units_sold(df: pd.DataFrame) -> pd.DataFrame:
    """
    Replace negative or missing units with 0.

    Non-numeric text counts as missing. The repair is silent: rows are
    never dropped here.
    """
    df = df.copy()
    units = pd.to_numeric(df["units_sold"], errors="coerce")

    repaired = int((units.isna() | (units < 0)).sum())
    if repaired > 0:
        logger.info(f"Units normalization: {repaired} negative/missing values set to 0")

    units = units.where(units >= 0, 0)

    # Whole units only; fractional counts lose their fraction
    truncated = int((units % 1 != 0).sum())
    if truncated > 0:
        logger.warning(f"Units normalization: {truncated} fractional values truncated")

    df["units_sold"] = units.astype("int64")
    return df


def convert_currency(df: pd.DataFrame, inr_per_usd: float = INR_PER_USD) -> pd.DataFrame:
    """
    Add price_usd = round(mrp / inr_per_usd, 2).

    A missing or non-numeric MRP leaves price_usd missing.
    """
    if inr_per_usd <= 0:
        raise ValueError(f"inr_per_usd must be positive, got {inr_per_usd}")

    df = df.copy()
    df["mrp"] = pd.to_numeric(df["mrp"], errors="coerce").astype("float64")
    df["price_usd"] = (df["mrp"] / inr_per_usd).round(2)
    return df


def derive_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Add sales = round(units_sold * price_usd, 2)."""
    df = df.copy()
    df["sales"] = (df["units_sold"] * df["price_usd"]).round(2)
    return df


def standardize_region(df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse Bengaluru and Hyderabad spellings into one label each.

    Matching is anchored at the start of the value and case-insensitive;
    every other region passes through unchanged.
    """
    df = df.copy()
    region = df["region"]
    text = region.astype("string")

    is_bengaluru = text.str.contains(BENGALURU_PATTERN, case=False, regex=True, na=False)
    is_hyderabad = text.str.contains(HYDERABAD_PATTERN, case=False, regex=True, na=False)

    df["region"] = (
        region.astype(object)
        .mask(is_bengaluru, "Bengaluru")
        .mask(is_hyderabad & ~is_bengaluru, "Hyderabad")
    )
    logger.info(f"Region normalization: {df['region'].nunique()} unique regions")
    return df


def classify_product_category(df: pd.DataFrame) -> pd.DataFrame:
    """
    Derive product_category from size.

    Purely numeric sizes are Footwear; anything else containing one of
    s/m/l/x (any case) is Apparel. Sizes matching neither rule, and missing
    sizes, get no category.
    """
    df = df.copy()
    size = df["size"].astype("string")

    is_footwear = size.str.fullmatch(FOOTWEAR_SIZE_PATTERN, na=False)
    is_apparel = ~is_footwear & size.str.contains(
        APPAREL_SIZE_PATTERN, case=False, regex=True, na=False
    )

    df["product_category"] = (
        pd.Series(None, index=df.index, dtype=object)
        .mask(is_footwear, "Footwear")
        .mask(is_apparel, "Apparel")
    )

    unclassified = int((df["product_category"].isna() & size.notna()).sum())
    if unclassified > 0:
        logger.warning(f"Category classification: {unclassified} sizes matched no category")
    return df


def parse_order_dates(df: pd.DataFrame) -> pd.DataFrame:
    """
    Parse order_date into a calendar date (midnight timestamp).

    Layouts in DATE_LAYOUTS are attempted in order and the first one that
    parses a value wins. Unparseable values become NaT. Columns that are
    already datetimes are only normalized.
    """
    df = df.copy()
    raw = df["order_date"]

    if pd.api.types.is_datetime64_any_dtype(raw):
        df["order_date"] = raw.dt.normalize()
        return df

    text = raw.astype("string").str.strip().fillna("")
    parsed = pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns]")

    for layout in DATE_LAYOUTS:
        pending = parsed.isna() & text.ne("")
        if not pending.any():
            break
        parsed.loc[pending] = pd.to_datetime(text[pending], format=layout, errors="coerce")

    failed = int((parsed.isna() & text.ne("")).sum())
    if failed > 0:
        logger.warning(f"Date parsing: {failed} order dates could not be parsed")

    df["order_date"] = parsed.dt.normalize()
    return df


def drop_incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Drop every row that still has a missing value in any column."""
    return df.dropna(how="any").reset_index(drop=True)


def clean_sales_with_counts(
    raw_df: pd.DataFrame,
    inr_per_usd: float = INR_PER_USD,
) -> tuple[pd.DataFrame, int]:
    """
    Run the full cleaning pipeline and report how many rows were discarded.

    Returns the cleaned DataFrame and the number of input rows dropped by
    the final completeness filter. The input DataFrame is never modified.
    """

    logger.info(f"Starting cleaning on {len(raw_df)} raw rows")

    # --------------------------------------------------
    # 1. Drop financial columns that carry no meaning
    # --------------------------------------------------
    df = drop_irrelevant_columns(raw_df)

    # --------------------------------------------------
    # 2. Units sold: negative / missing -> 0
    # --------------------------------------------------
    df = normalize_units_sold(df)

    # --------------------------------------------------
    # 3. Currency conversion INR -> USD
    # --------------------------------------------------
    df = convert_currency(df, inr_per_usd=inr_per_usd)

    # --------------------------------------------------
    # 4. Sales = units x USD price
    # --------------------------------------------------
    df = derive_sales(df)

    # --------------------------------------------------
    # 5. Region spellings -> Bengaluru / Hyderabad
    # --------------------------------------------------
    df = standardize_region(df)

    # --------------------------------------------------
    # 6. Footwear vs apparel from size
    # --------------------------------------------------
    df = classify_product_category(df)

    # --------------------------------------------------
    # 7. Order dates (year-month-day first, then day-month-year)
    # --------------------------------------------------
    df = parse_order_dates(df)

    # --------------------------------------------------
    # 8. Completeness filter
    # --------------------------------------------------
    cleaned_df = drop_incomplete_rows(df)
    dropped = len(df) - len(cleaned_df)
    if dropped > 0:
        logger.warning(f"Completeness filter: removed {dropped} rows with missing values")

    logger.info(f"Cleaning completed: {len(cleaned_df)} records ready for reporting")
    return cleaned_df, dropped


def clean_sales(raw_df: pd.DataFrame, inr_per_usd: float = INR_PER_USD) -> pd.DataFrame:
    """Clean and enrich the raw sales export. See clean_sales_with_counts."""
    cleaned_df, _ = clean_sales_with_counts(raw_df, inr_per_usd=inr_per_usd)
    return cleaned_df
