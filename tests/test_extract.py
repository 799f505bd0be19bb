"""
Unit tests for raw export extraction.
"""

import pytest
import pandas as pd
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sales_insights.etl.extract import extract_sales_csv, normalize_columns, read_sales_csv_text


class TestNormalizeColumns:
    """Column name normalization."""

    def test_normalize_columns(self):
        df = pd.DataFrame(columns=["Order_ID", " Units Sold ", "Sales-Channel", "MRP"])
        result = normalize_columns(df)
        assert list(result.columns) == ["order_id", "units_sold", "sales_channel", "mrp"]

    def test_normalize_columns_returns_copy(self):
        df = pd.DataFrame(columns=["Order_ID"])
        normalize_columns(df)
        assert list(df.columns) == ["Order_ID"]


class TestExtractSalesCsv:
    """Local CSV extraction."""

    def test_extract_normalizes_export_headers(self, raw_sales_csv, raw_sales_df):
        result = extract_sales_csv(raw_sales_csv)
        assert list(result.columns) == list(raw_sales_df.columns)
        assert len(result) == len(raw_sales_df)

    def test_extract_keeps_size_text(self, raw_sales_csv):
        result = extract_sales_csv(raw_sales_csv)
        assert "XL7" in result["size"].values
        assert "M" in result["size"].values

    def test_extract_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            extract_sales_csv(tmp_path / "missing.csv")

    def test_extract_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(RuntimeError):
            extract_sales_csv(path)

    def test_extract_latin1_file(self, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes(b"Order_ID,Region\n1,S\xe3o Paulo\n")
        result = extract_sales_csv(path)
        assert result["region"].iloc[0] == "São Paulo"


class TestReadSalesCsvText:
    """CSV text parsing used by the S3 extractor."""

    def test_read_text(self):
        content = "Order_ID,Units_Sold,MRP\n1,2,880\n2,-1,264\n"
        result = read_sales_csv_text(content)
        assert list(result.columns) == ["order_id", "units_sold", "mrp"]
        assert result["units_sold"].tolist() == [2, -1]

    def test_read_blank_text(self):
        with pytest.raises(RuntimeError):
            read_sales_csv_text("   ")


class TestExtractFromS3:
    """S3 extraction with the Airflow S3 hook mocked out."""

    def test_extract_from_s3(self, monkeypatch):
        pytest.importorskip("airflow.providers.amazon.aws.hooks.s3")
        from sales_insights.etl import extract_s3

        class FakeHook:
            def __init__(self, aws_conn_id):
                self.aws_conn_id = aws_conn_id

            def read_key(self, key, bucket_name):
                assert key == "sales-data/export.csv"
                assert bucket_name == "retail-sales-raw"
                return "Order_ID,Region\n1,Bangalore\n"

        monkeypatch.setattr(extract_s3, "S3Hook", FakeHook)
        result = extract_s3.extract_sales_from_s3("aws_default", "retail-sales-raw", "sales-data/export.csv")
        assert list(result.columns) == ["order_id", "region"]
        assert result["region"].iloc[0] == "Bangalore"

    def test_extract_from_s3_missing_key(self, monkeypatch):
        pytest.importorskip("airflow.providers.amazon.aws.hooks.s3")
        from botocore.exceptions import ClientError
        from sales_insights.etl import extract_s3

        class FakeHook:
            def __init__(self, aws_conn_id):
                pass

            def read_key(self, key, bucket_name):
                raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")

        monkeypatch.setattr(extract_s3, "S3Hook", FakeHook)
        with pytest.raises(ValueError, match="not found"):
            extract_s3.extract_sales_from_s3("aws_default", "retail-sales-raw", "missing.csv")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
