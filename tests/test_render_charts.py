"""
Unit tests for chart rendering.

Charts are checked for existence and PNG content, not pixels.
"""

import pytest
import pandas as pd
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sales_insights.etl.render_charts import CHART_BUILDERS, render_report
from sales_insights.etl.transform import clean_sales

PNG_MAGIC = b"\x89PNG"


class TestRenderReport:

    def test_renders_every_chart(self, clean_sales_df, tmp_path):
        charts = render_report(clean_sales_df, tmp_path / "charts", dpi=50)
        assert set(charts) == set(CHART_BUILDERS)
        assert len(charts) == 12
        for path in charts.values():
            assert path.exists()
            assert path.read_bytes()[:4] == PNG_MAGIC

    def test_renders_from_cleaned_export(self, raw_sales_df, tmp_path):
        charts = render_report(clean_sales(raw_sales_df), tmp_path, dpi=50)
        assert (tmp_path / "07_channel_trends.png").exists()
        assert charts["11_regional_positioning"].stat().st_size > 0

    def test_empty_table_still_writes_charts(self, clean_sales_df, tmp_path):
        """Zero rows must not crash any chart."""
        charts = render_report(clean_sales_df.iloc[0:0], tmp_path, dpi=50)
        assert len(charts) == 12
        assert all(path.exists() for path in charts.values())

    def test_single_region_bubble_chart(self, clean_sales_df, tmp_path):
        one_region = clean_sales_df[clean_sales_df["region"] == "Mumbai"]
        charts = render_report(one_region, tmp_path, dpi=50)
        assert charts["11_regional_positioning"].exists()

    def test_creates_output_dir(self, clean_sales_df, tmp_path):
        target = tmp_path / "nested" / "charts"
        render_report(clean_sales_df, target, dpi=50)
        assert target.is_dir()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
