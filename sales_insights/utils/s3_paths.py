"""
S3 path helpers.

We keep S3 key construction in one place to avoid subtle bugs caused by missing
or double slashes between the configured raw folder and the export file name.
"""


def _ensure_trailing_slash(prefix: str) -> str:
    if not prefix:
        return ""
    return prefix if prefix.endswith("/") else f"{prefix}/"


def _strip_leading_slash(path: str) -> str:
    return path.lstrip("/") if path else ""


def build_raw_s3_key(raw_folder: str, relative_key: str) -> str:
    """
    Build a full S3 key for the raw sales export.

    Example:
        build_raw_s3_key("sales-data", "Nike_Sales_Uncleaned.csv")
        -> "sales-data/Nike_Sales_Uncleaned.csv"
    """

    return f"{_ensure_trailing_slash(raw_folder)}{_strip_leading_slash(relative_key)}"


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """
    Split an ``s3://bucket/key`` URI into its bucket and key.

    Example:
        parse_s3_uri("s3://retail-sales-raw/sales-data/export.csv")
        -> ("retail-sales-raw", "sales-data/export.csv")
    """
    if not uri.startswith("s3://"):
        raise ValueError(f"Invalid S3 URI '{uri}': expected s3://bucket/key")

    bucket, _, key = uri.removeprefix("s3://").partition("/")
    if not bucket or not key:
        raise ValueError(
            f"Invalid S3 URI '{uri}': expected s3://bucket/key. "
            "Provide both bucket and key."
        )
    return bucket, _strip_leading_slash(key)
