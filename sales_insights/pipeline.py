"""
Command line entry point for the sales insights report.

Runs the same stages as the Airflow DAG without a scheduler:

    1. Extract    - read the raw export (local CSV or s3://bucket/key)
    2. Validate   - check the export has every required column
    3. Clean      - repair, derive and filter rows
    4. Validate   - check the cleaned table against the output schema
    5. Report     - aggregate and write the chart PNGs

Usage:
    python -m sales_insights.pipeline --input data/raw/Nike_Sales_Uncleaned.csv
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from sales_insights.etl.extract import extract_sales_csv
from sales_insights.etl.render_charts import render_report
from sales_insights.etl.transform import INR_PER_USD, clean_sales_with_counts
from sales_insights.logger import setup_logger
from sales_insights.utils import build_raw_s3_key, load_config, parse_s3_uri
from sales_insights.validations.validate_inputs import validate_raw_sales
from sales_insights.validations.validate_outputs import validate_sales_clean

logger = setup_logger("sales_insights.pipeline")


def extract_source(source: Optional[str], config: dict[str, Any]) -> pd.DataFrame:
    """
    Read the raw export from an explicit source or from the configured one.

    S3 sources need the Airflow Amazon provider, imported only when used.
    """
    source_cfg = config.get("source", {})
    s3_cfg = source_cfg.get("s3") or {}

    if source and source.startswith("s3://"):
        bucket, key = parse_s3_uri(source)
    elif not source and s3_cfg.get("enabled", False):
        bucket = s3_cfg.get("bucket")
        key = build_raw_s3_key(s3_cfg.get("raw_folder", ""), s3_cfg.get("sales_key", ""))
    else:
        path = source or source_cfg.get("path")
        if not path:
            raise ValueError("No input given: pass --input or set source.path in the config")
        return extract_sales_csv(path)

    from sales_insights.etl.extract_s3 import extract_sales_from_s3

    return extract_sales_from_s3(
        aws_conn_id=s3_cfg.get("aws_conn_id", "aws_default"),
        bucket=bucket,
        sales_key=key,
    )


def run_pipeline(
    source: Optional[str] = None,
    output_dir: Optional[str] = None,
    config: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Run extract -> validate -> clean -> validate -> report.

    Returns a run summary with row counts and the written chart paths.
    Stage errors propagate to the caller after being logged.
    """
    config = config if config is not None else load_config()
    cleaning_cfg = config.get("cleaning", {})
    report_cfg = config.get("report", {})

    start_time = datetime.now()
    logger.info(f"Pipeline started - source: {source or 'from config'}")

    # ===========STAGE 1: EXTRACT============
    raw_df = extract_source(source, config)

    # ===========STAGE 2: STRUCTURE VALIDATION============
    raw_df = validate_raw_sales(raw_df)

    # ===========STAGE 3: CLEAN============
    clean_df, dropped = clean_sales_with_counts(
        raw_df,
        inr_per_usd=cleaning_cfg.get("inr_per_usd", INR_PER_USD),
    )

    # ===========STAGE 4: OUTPUT VALIDATION============
    clean_df, invalid = validate_sales_clean(clean_df)
    if clean_df.empty:
        logger.warning("No rows survived cleaning - charts will be empty")

    # ===========STAGE 5: REPORT============
    charts = render_report(
        clean_df,
        output_dir or report_cfg.get("output_dir", "reports/charts"),
        dpi=report_cfg.get("dpi", 140),
    )

    duration = (datetime.now() - start_time).total_seconds()
    summary = {
        "input_rows": len(raw_df),
        "clean_rows": len(clean_df),
        "dropped_rows": dropped,
        "invalid_output_rows": invalid,
        "charts": charts,
    }

    logger.info("=" * 60)
    logger.info("PIPELINE COMPLETE")
    logger.info(f"  Duration      : {duration:.2f}s")
    logger.info(f"  Input rows    : {summary['input_rows']}")
    logger.info(f"  Clean rows    : {summary['clean_rows']}")
    logger.info(f"  Dropped rows  : {dropped}")
    logger.info(f"  Charts written: {len(charts)}")
    logger.info("=" * 60)

    return summary


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sales-insights",
        description="Clean a retail sales export and render the sales report charts.",
    )
    parser.add_argument(
        "--input", "-i",
        help="Raw sales CSV (local path or s3://bucket/key). Defaults to source.path in the config.",
    )
    parser.add_argument(
        "--output-dir", "-o",
        help="Directory for chart PNGs. Defaults to report.output_dir in the config.",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to a YAML config file. Defaults to the packaged config.yaml.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        run_pipeline(source=args.input, output_dir=args.output_dir, config=config)

    except FileNotFoundError as e:
        logger.error(f"Extraction failed - file not found: {e}")
        return 1

    except (RuntimeError, ValueError, PermissionError) as e:
        logger.error(f"Pipeline halted: {e}")
        return 1

    except Exception as e:
        logger.error(f"Pipeline failed unexpectedly: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
