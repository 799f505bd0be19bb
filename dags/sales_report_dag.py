from datetime import datetime, timedelta
from airflow.decorators import dag, task
from airflow.exceptions import AirflowException
from typing import Any

from sales_insights.logger import setup_logger
from sales_insights.utils import build_raw_s3_key, load_config

# Load config
config = load_config()

SOURCE_CONFIG = config["source"]
S3_CONFIG = SOURCE_CONFIG.get("s3") or {}
AWS_CONN_ID = S3_CONFIG.get("aws_conn_id", "aws_default")
BUCKET = S3_CONFIG.get("bucket")
SALES_KEY = build_raw_s3_key(
    S3_CONFIG.get("raw_folder", "sales-data/"),
    S3_CONFIG.get("sales_key", "Nike_Sales_Uncleaned.csv"),
)
LOCAL_PATH = SOURCE_CONFIG.get("path")
USE_S3 = S3_CONFIG.get("enabled", False)
INR_PER_USD = config["cleaning"].get("inr_per_usd", 88)
OUTPUT_DIR = config["report"].get("output_dir", "reports/charts")
CHART_DPI = config["report"].get("dpi", 140)

# Default arguments for DAG
DEFAULT_ARGS = {
    "owner": "data-analytics",
    "email_on_failure": False,  # Disabled until SMTP is configured
    "email_on_retry": False,
    "retries": 1,
    "retry_delay": timedelta(minutes=5),
    "execution_timeout": timedelta(minutes=30),
}


@dag(
    dag_id="sales_report_pipeline",
    description="""
    Sales Report Pipeline - Reads the raw retail sales export, cleans and
    enriches it, and renders the sales report charts.

    Data Flow:
    1. Extract: Load the sales CSV from S3 or local disk
    2. Validate: Check the export carries every required column
    3. Clean: Repair units, convert prices to USD, derive sales, normalize
       regions, classify footwear/apparel, parse dates, drop incomplete rows
    4. Validate: Check the cleaned table with the Pandera output schema
    5. Report: Aggregate and write eleven chart PNGs
    """,
    start_date=datetime(2026, 1, 1),
    schedule="@weekly",
    catchup=False,
    max_active_runs=1,
    default_args=DEFAULT_ARGS,
    tags=["retail", "reporting"],
    doc_md=__doc__,
)
def sales_report_pipeline():
    """
    Sales Report Pipeline DAG

    Cleans the raw sales export and renders the report charts.
    """
    from sales_insights.etl.extract import extract_sales_csv
    from sales_insights.etl.extract_s3 import extract_sales_from_s3
    from sales_insights.etl.render_charts import render_report
    from sales_insights.etl.transform import clean_sales_with_counts
    from sales_insights.validations.validate_inputs import validate_raw_sales
    from sales_insights.validations.validate_outputs import validate_sales_clean

    logger = setup_logger("dags.sales_report_pipeline")

    @task(
        task_id="extract_raw_sales",
        doc_md="""
        Extracts the raw sales export from S3 (source.s3.enabled) or local disk.

        **Column Normalization:**
        - Converts all column names to lowercase
        - Replaces spaces and dashes with underscores
        """,
    )
    def extract():
        """Extract the raw sales export"""
        try:
            if USE_S3:
                sales_df = extract_sales_from_s3(
                    aws_conn_id=AWS_CONN_ID,
                    bucket=BUCKET,
                    sales_key=SALES_KEY,
                )
            else:
                sales_df = extract_sales_csv(LOCAL_PATH)
            logger.info(f"✓ Extracted {len(sales_df)} sales records")
            return sales_df
        except Exception as e:
            logger.error(f"✗ Extraction failed: {str(e)}")
            raise AirflowException(f"Data extraction failed: {str(e)}")

    @task(
        task_id="validate_input_structure",
        doc_md="""
        Checks the raw export against the input schema.

        **Quality Checks:**
        - order_id, order_date, units_sold, mrp, size, product_line,
          product_name, sales_channel, region, gender_category present

        Row values are not rejected here; cleaning repairs or drops them.
        """,
    )
    def validate_input(sales_df: Any):
        """Validate the raw export structure"""
        try:
            validated_df = validate_raw_sales(sales_df)
            logger.info("✓ Input structure validation passed")
            return validated_df
        except ValueError as e:
            logger.error(f"✗ Input validation failed: {str(e)}")
            raise AirflowException(f"Input validation failed: {str(e)}")

    @task(
        task_id="clean_sales",
        doc_md="""
        Cleans and enriches the raw export.

        **Steps:**
        1. Drop revenue, profit and discount columns
        2. Negative / missing units sold -> 0
        3. price_usd = round(mrp / inr_per_usd, 2)
        4. sales = round(units_sold * price_usd, 2)
        5. Bengaluru / Hyderabad region spellings collapsed
        6. product_category from size (Footwear / Apparel)
        7. order_date parsed (year-month-day first, then day-month-year)
        8. Rows with any missing value dropped
        """,
    )
    def clean(sales_df: Any):
        """Clean and enrich the sales data"""
        try:
            clean_df, dropped = clean_sales_with_counts(sales_df, inr_per_usd=INR_PER_USD)
            logger.info(f"✓ Cleaning completed: {len(clean_df)} records ({dropped} dropped)")
            return clean_df
        except Exception as e:
            logger.error(f"✗ Cleaning failed: {str(e)}")
            raise AirflowException(f"Data cleaning failed: {str(e)}")

    @task(
        task_id="validate_and_render_report",
        doc_md="""
        Final validation, then renders the report charts.

        **Final Quality Checks:**
        - units_sold >= 0
        - product_category in {{Footwear, Apparel}}
        - No null values in any report column

        **Output Location:**
        - {output_dir}/*.png
        """.format(output_dir=OUTPUT_DIR),
    )
    def validate_and_render(clean_df: Any):
        """Validate output and render charts"""
        try:
            valid_df, invalid = validate_sales_clean(clean_df)
            logger.info(f"✓ Output validation passed: {len(valid_df)} records")
            if invalid > 0:
                logger.warning(f"  ⚠ {invalid} issues failed validation and were excluded")

            charts = render_report(valid_df, OUTPUT_DIR, dpi=CHART_DPI)

            success_msg = f"✓ Pipeline SUCCESS: {len(charts)} charts written to {OUTPUT_DIR}"
            logger.info(success_msg)
            return success_msg

        except Exception as e:
            logger.error(f"✗ Validation/Report failed: {str(e)}")
            raise AirflowException(f"Pipeline failed at final stage: {str(e)}")

    # Define task dependencies
    extracted = extract()
    validated = validate_input(extracted)
    cleaned = clean(validated)
    validate_and_render(cleaned)


# Instantiate DAG
sales_report_pipeline()
