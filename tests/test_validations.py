"""
Unit tests for data validation functions.

Tests validate the input structure check and the output schema validator
handle valid, invalid, and edge case data.
"""

import pytest
import pandas as pd
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sales_insights.etl.transform import clean_sales
from sales_insights.validations.input_schemas import REQUIRED_RAW_COLUMNS
from sales_insights.validations.validate_inputs import validate_raw_sales
from sales_insights.validations.validate_outputs import validate_sales_clean


class TestInputStructureValidation:
    """Test suite for raw export structure validation."""

    def test_valid_export_passes(self, raw_sales_df):
        """Row defects do not fail structure validation."""
        validated = validate_raw_sales(raw_sales_df)
        assert len(validated) == len(raw_sales_df)

    def test_financial_columns_optional(self, raw_sales_df):
        df = raw_sales_df.drop(columns=["revenue", "profit", "discount_applied"])
        validated = validate_raw_sales(df)
        assert len(validated) == len(df)

    def test_extra_columns_allowed(self, raw_sales_df):
        df = raw_sales_df.assign(store_code="BLR-01")
        validated = validate_raw_sales(df)
        assert "store_code" in validated.columns

    def test_missing_required_column_raises(self, raw_sales_df):
        df = raw_sales_df.drop(columns=["mrp"])
        with pytest.raises(ValueError, match="mrp"):
            validate_raw_sales(df)

    def test_missing_several_columns_listed(self, raw_sales_df):
        df = raw_sales_df.drop(columns=["size", "region"])
        with pytest.raises(ValueError) as exc_info:
            validate_raw_sales(df)
        assert "size" in str(exc_info.value)
        assert "region" in str(exc_info.value)

    def test_required_columns_cover_report_fields(self):
        for col in ["region", "gender_category", "sales_channel", "product_line", "units_sold"]:
            assert col in REQUIRED_RAW_COLUMNS


class TestOutputValidation:
    """Test suite for cleaned data validation."""

    @pytest.fixture
    def valid_clean_df(self, raw_sales_df):
        """Cleaned table produced by the real pipeline."""
        return clean_sales(raw_sales_df)

    def test_valid_clean_passes_output_validation(self, valid_clean_df):
        cleaned_df, dropped = validate_sales_clean(valid_clean_df)
        assert len(cleaned_df) == len(valid_clean_df)
        assert dropped == 0

    def test_fixture_clean_table_passes(self, clean_sales_df):
        cleaned_df, dropped = validate_sales_clean(clean_sales_df)
        assert len(cleaned_df) == 6
        assert dropped == 0

    def test_negative_units_dropped(self, valid_clean_df):
        df = valid_clean_df.copy()
        df.loc[0, "units_sold"] = -1
        cleaned_df, dropped = validate_sales_clean(df)
        assert dropped == 1
        assert len(cleaned_df) == len(df) - 1
        assert (cleaned_df["units_sold"] >= 0).all()

    def test_removed_records_logged(self, valid_clean_df, caplog):
        df = valid_clean_df.copy()
        df.loc[0, "units_sold"] = -1
        df.loc[1, "product_category"] = "Accessories"
        with caplog.at_level("WARNING", logger="validation.output"):
            cleaned_df, failures = validate_sales_clean(df)
        assert failures == 2
        assert len(cleaned_df) == len(df) - 2
        assert "Removed 2 sale records" in caplog.text

    def test_unknown_category_dropped(self, valid_clean_df):
        df = valid_clean_df.copy()
        df.loc[1, "product_category"] = "Accessories"
        cleaned_df, dropped = validate_sales_clean(df)
        assert dropped == 1
        assert "Accessories" not in cleaned_df["product_category"].values

    def test_null_region_dropped(self, valid_clean_df):
        df = valid_clean_df.copy()
        df.loc[2, "region"] = None
        cleaned_df, dropped = validate_sales_clean(df)
        assert dropped == 1
        assert cleaned_df["region"].notna().all()

    def test_missing_column_raises(self, valid_clean_df):
        df = valid_clean_df.drop(columns=["sales"])
        with pytest.raises(ValueError, match="cannot feed the report"):
            validate_sales_clean(df)

    def test_unparsed_dates_raise(self, valid_clean_df):
        df = valid_clean_df.copy()
        df["order_date"] = df["order_date"].dt.strftime("%Y-%m-%d")
        with pytest.raises(ValueError):
            validate_sales_clean(df)

    def test_empty_clean_table_passes(self, raw_sales_df):
        empty = clean_sales(raw_sales_df.iloc[0:0])
        cleaned_df, dropped = validate_sales_clean(empty)
        assert cleaned_df.empty
        assert dropped == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
