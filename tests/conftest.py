"""
Pytest configuration and fixtures for the sales insights tests.

This file is automatically discovered by pytest and provides
shared fixtures and configuration for all test modules.
"""

import pytest
import pandas as pd
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def raw_sales_df():
    """
    Raw export rows (normalized column names) covering the cleaning rules.

    Rows 2001, 2002, 2003, 2004 and 2009 survive cleaning; the others are
    dropped for a missing MRP, an unclassifiable size, a missing size and an
    unparseable date.
    """
    return pd.DataFrame({
        "order_id": [2001, 2002, 2003, 2004, 2005, 2006, 2007, 2008, 2009],
        "gender_category": ["Men", "Women", "Kids", "Men", "Women", "Men", "Kids", "Women", "Men"],
        "product_line": [
            "Running", "Training", "Lifestyle", "Basketball", "Running",
            "Training", "Soccer", "Lifestyle", "Running",
        ],
        "product_name": [
            "Air Zoom", "Dri-FIT Tee", "Tech Fleece", "Jordan 1", "Pegasus",
            "Pro Shorts", "Phantom", "Blazer", "Vomero",
        ],
        "size": ["8", "M", "XL7", "10.5", "9", "Q", None, "7", "11"],
        "units_sold": [-5, 3, 2, None, 4, 1, 2, 1, 2],
        "mrp": [880, 264, 4400, 8800, None, 1760, 1760, 1760, 17600],
        "discount_applied": [0.1, 0.0, None, 0.2, 0.0, 0.0, 0.1, 0.0, 0.3],
        "revenue": [0, 792, 8800, 0, None, 1760, 3520, 1760, 35200],
        "order_date": [
            "2023-01-15", "15-01-2023", "2023-02-10", "2023/03/05", "2023-03-06",
            "2023-04-01", "2023-04-02", "not a date", "2024-01-20",
        ],
        "sales_channel": ["Online", "Retail", "Online", "Retail", "Online", "Retail", "Online", "Retail", "Retail"],
        "region": [
            "Bangalore", "Hyderabad North", "bengaluru", "Mumbai", "Delhi",
            "Pune", "Kolkata", "Delhi", "HYD",
        ],
        "profit": [100, 50, None, 10, 20, 30, 40, 50, 60],
    })


@pytest.fixture
def raw_sales_csv(tmp_path, raw_sales_df):
    """
    Write the raw rows as a CSV with export-style headers (e.g. "Order_Id").
    """
    path = tmp_path / "sales_raw.csv"
    raw_sales_df.rename(columns=str.title).to_csv(path, index=False)
    return path


@pytest.fixture
def clean_sales_df():
    """
    Small cleaned table spanning both channels, categories, genders and years.
    """
    return pd.DataFrame({
        "order_id": [1, 2, 3, 4, 5, 6],
        "gender_category": ["Men", "Women", "Kids", "Men", "Women", "Men"],
        "product_line": ["Running", "Training", "Running", "Basketball", "Lifestyle", "Running"],
        "product_name": ["Air Zoom", "Dri-FIT Tee", "Air Zoom", "Jordan 1", "Tech Fleece", "Vomero"],
        "size": ["8", "M", "5", "10", "S", "11"],
        "units_sold": [2, 3, 1, 0, 4, 5],
        "mrp": [4400, 2640, 8800, 17600, 26400, 30800],
        "order_date": pd.to_datetime([
            "2023-01-15", "2023-01-20", "2023-02-10", "2023-03-05", "2024-01-07", "2024-02-11",
        ]),
        "sales_channel": ["Online", "Retail", "Online", "Retail", "Online", "Retail"],
        "region": ["Bengaluru", "Hyderabad", "Bengaluru", "Mumbai", "Delhi", "Mumbai"],
        "price_usd": [50.0, 30.0, 100.0, 200.0, 300.0, 350.0],
        "sales": [100.0, 90.0, 100.0, 0.0, 1200.0, 1750.0],
        "product_category": ["Footwear", "Apparel", "Footwear", "Footwear", "Apparel", "Footwear"],
    })


@pytest.fixture
def pipeline_config(tmp_path, raw_sales_csv):
    """Config dict pointing at the raw CSV fixture and a temp chart dir."""
    return {
        "source": {"path": str(raw_sales_csv), "s3": {"enabled": False}},
        "cleaning": {"inr_per_usd": 88},
        "report": {"output_dir": str(tmp_path / "charts"), "dpi": 60},
    }
