from pandera.pandas import Column, DataFrameSchema


# Raw export columns after name normalization. Values are all nullable:
# row defects are repaired or dropped by the cleaning stage, so this schema
# only guards the structure of the file.
REQUIRED_RAW_COLUMNS = [
    "order_id",
    "gender_category",
    "product_line",
    "product_name",
    "size",
    "units_sold",
    "mrp",
    "order_date",
    "sales_channel",
    "region",
]

OPTIONAL_RAW_COLUMNS = ["discount_applied", "revenue", "profit"]


raw_sales_schema = DataFrameSchema(
    {
        # Identifiers
        **{name: Column(nullable=True) for name in REQUIRED_RAW_COLUMNS},

        # Financial fields, dropped during cleaning
        **{
            name: Column(nullable=True, required=False)
            for name in OPTIONAL_RAW_COLUMNS
        },
    },
    strict=False  # Allow extra columns (passed through untouched)
)
