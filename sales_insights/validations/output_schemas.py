import pandas as pd
from pandera.pandas import Check, Column, DataFrameSchema


PRODUCT_CATEGORIES = ["Footwear", "Apparel"]


sales_clean_schema = DataFrameSchema(
    {
        # Identifiers
        "order_id": Column(nullable=False),

        # Dimensions used for grouping in the report
        "gender_category": Column(nullable=False),
        "product_line": Column(nullable=False),
        "product_name": Column(nullable=False),
        "sales_channel": Column(nullable=False),
        "region": Column(nullable=False),
        "size": Column(nullable=False),
        "product_category": Column(
            checks=Check.isin(PRODUCT_CATEGORIES),
            nullable=False,
        ),

        # Measures (prices are not range-checked: cleaning keeps them as exported)
        "units_sold": Column(int, Check.ge(0), nullable=False),
        "mrp": Column(nullable=False),
        "price_usd": Column(float, nullable=False),
        "sales": Column(float, nullable=False),

        # Date dimension
        "order_date": Column(
            checks=Check(
                lambda s: pd.api.types.is_datetime64_any_dtype(s),
                error="order_date must be a datetime column",
            ),
            nullable=False,
        ),
    },
    strict=False  # Raw columns outside the report contract pass through
)
