from pandera.errors import SchemaErrors
from .input_schemas import REQUIRED_RAW_COLUMNS, raw_sales_schema
from sales_insights.logger import setup_logger

logger = setup_logger('validation.input')


def validate_raw_sales(df):
    """
    Check that the raw export carries every column the cleaning stage reads.

    Only structure is checked: row values are left to the cleaning stage,
    which repairs or drops defective rows itself.
    """
    logger.info(f"Starting structure validation on {len(df)} rows")
    try:
        validated_df = raw_sales_schema.validate(df, lazy=True)
        logger.info("Structure validation passed")
        return validated_df

    except SchemaErrors as err:
        missing = [name for name in REQUIRED_RAW_COLUMNS if name not in df.columns]
        logger.error(f"Structure validation failed:\n{err.failure_cases}")
        if missing:
            raise ValueError(
                f"Sales export is missing required columns: {', '.join(missing)}"
            ) from err
        raise ValueError(f"Sales export failed structure validation: {err}") from err
