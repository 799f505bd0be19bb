import pandas as pd
from airflow.providers.amazon.aws.hooks.s3 import S3Hook
from botocore.exceptions import ClientError

from sales_insights.etl.extract import read_sales_csv_text
from sales_insights.logger import setup_logger

logger = setup_logger("etl.extract_s3")


def extract_sales_from_s3(aws_conn_id: str, bucket: str, sales_key: str) -> pd.DataFrame:
    """
    Extract the raw sales CSV from S3 and return a DataFrame.
    Normalizes column names to lowercase with underscores.
    """
    if not bucket or not sales_key:
        raise ValueError("Bucket and key must not be empty")

    hook = S3Hook(aws_conn_id=aws_conn_id)

    logger.info(f"Extracting sales from s3://{bucket}/{sales_key}")
    try:
        sales_content = hook.read_key(key=sales_key, bucket_name=bucket)
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        if error_code in ("NoSuchBucket", "NoSuchKey"):
            logger.error(f"Sales export s3://{bucket}/{sales_key} does not exist")
            raise ValueError(f"S3 object s3://{bucket}/{sales_key} not found") from e
        elif error_code == "AccessDenied":
            logger.error(f"Access denied to bucket '{bucket}'")
            raise PermissionError(
                f"Access denied to S3 bucket '{bucket}'. "
                "Check AWS credentials and bucket permissions."
            ) from e
        else:
            logger.error(f"S3 read failed: {error_code} - {e}")
            raise

    sales_df = read_sales_csv_text(sales_content)
    logger.info(f"Successfully extracted {len(sales_df)} rows from sales")
    logger.info(f"Normalized sales columns: {list(sales_df.columns)}")

    return sales_df
