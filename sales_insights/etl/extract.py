from io import StringIO
from pathlib import Path
from typing import Union

import pandas as pd
from sales_insights.logger import setup_logger

logger = setup_logger("etl.extract")


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize column names to lowercase snake case.

    Example: "Units_Sold" -> "units_sold", "Sales Channel" -> "sales_channel"
    """
    df = df.copy()
    df.columns = (
        df.columns
        .str.strip()
        .str.lower()
        .str.replace(" ", "_")
        .str.replace("-", "_")
    )
    return df


def read_sales_csv_text(content: str) -> pd.DataFrame:
    """
    Parse raw CSV text (e.g. an S3 object body) into a normalized DataFrame.
    """
    if not content or not content.strip():
        raise RuntimeError("Sales export is empty - nothing to read")

    try:
        sales_df = pd.read_csv(StringIO(content))
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise RuntimeError(f"Sales export could not be parsed: {e}") from e

    return normalize_columns(sales_df)


def extract_sales_csv(filepath: Union[str, Path]) -> pd.DataFrame:
    """
    Read the raw sales export from local disk.

    Raises FileNotFoundError when the file is missing and RuntimeError when
    it exists but cannot be decoded or parsed as CSV.
    """
    path = Path(filepath)
    logger.info(f"Extracting sales from {path}")

    if not path.exists():
        raise FileNotFoundError(f"Sales export not found: {path}")

    try:
        sales_df = pd.read_csv(path)
    except UnicodeDecodeError:
        logger.warning("UTF-8 decode failed, retrying with latin-1")
        try:
            sales_df = pd.read_csv(path, encoding="latin-1")
        except Exception as e:
            raise RuntimeError(f"Could not read sales export {path}: {e}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise RuntimeError(f"Could not read sales export {path}: {e}") from e

    logger.info(f"Successfully extracted {len(sales_df)} rows from sales")

    sales_df = normalize_columns(sales_df)
    logger.info(f"Normalized sales columns: {list(sales_df.columns)}")

    return sales_df
