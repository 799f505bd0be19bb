from pandera.errors import SchemaErrors
from .output_schemas import sales_clean_schema
from sales_insights.logger import setup_logger

logger = setup_logger("validation.output")


def _split_failures(failure_cases):
    """Separate row-level failure cases from table-level ones (no index)."""
    table_level = failure_cases["index"].isna()
    return failure_cases[~table_level], failure_cases[table_level]


def validate_sales_clean(df):
    """
    Check the cleaned sales table against the report contract.

    Returns the checked table and the number of failure cases found. Sale
    records that break the contract are removed; a broken table (missing
    report column, order_date not parsed to datetimes) raises ValueError.
    """
    logger.info(f"Checking {len(df)} cleaned sale records against the report contract")

    try:
        return sales_clean_schema.validate(df, lazy=True), 0
    except SchemaErrors as err:
        schema_error = err

    failures = schema_error.failure_cases

    row_failures, table_failures = _split_failures(failures)
    by_check = failures.groupby(["column", "check"]).size()
    logger.error(f"Report contract broken by {len(failures)} failure cases:\n{by_check}")

    if not table_failures.empty:
        raise ValueError(
            f"Cleaned sales table cannot feed the report:\n{table_failures}"
        ) from schema_error

    bad_records = row_failures["index"].unique()
    kept_df = df.drop(index=bad_records)
    logger.warning(f"Removed {len(bad_records)} sale records that break the report contract")

    try:
        kept_df = sales_clean_schema.validate(kept_df, lazy=True)
        logger.info(f"{len(kept_df)} sale records passed the report contract")
    except SchemaErrors as recheck:
        logger.warning(
            f"{len(recheck.failure_cases)} failure cases remain after removing bad records; "
            "continuing with the remaining sale records"
        )

    return kept_df, len(failures)
