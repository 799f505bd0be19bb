"""
Shared utilities for the sales insights pipeline.

Keep helpers here small and dependency-light so DAG parsing stays reliable.
"""

from .config import DEFAULT_CONFIG_PATH, load_config
from .s3_paths import build_raw_s3_key, parse_s3_uri

__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "build_raw_s3_key", "parse_s3_uri"]
