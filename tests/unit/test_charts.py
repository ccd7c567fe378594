"""
Unit tests for progress chart rendering.

Charts are rendered with the Agg backend into a temporary directory.
"""

import pytest

from pecs_analytics.analytics.trend_analyzer import TrendAnalyzer
from pecs_analytics.reports import ProgressChartRenderer


@pytest.fixture
def renderer():
    return ProgressChartRenderer(dpi=50)


@pytest.fixture
def points(make_point):
    return [make_point(i, 0.5 + i * 0.04, phase=1 + i // 4) for i in range(10)]


class TestProgressCharts:
    """Test suite for ProgressChartRenderer."""

    def test_success_trend(self, renderer, points, tmp_path):
        path = renderer.plot_success_trend(points, tmp_path / "success.png")
        assert path.exists()
        assert path.stat().st_size > 0

    def test_empty_data_still_renders(self, renderer, tmp_path):
        assert renderer.plot_success_trend([], tmp_path / "empty.png").exists()
        assert renderer.plot_response_times([], tmp_path / "empty_rt.png").exists()

    def test_skill_and_weekly_charts(self, renderer, points, reference_now, tmp_path):
        analyzer = TrendAnalyzer(points)

        skills = renderer.plot_skill_breakdown(
            analyzer.analyze_skill_breakdown(), tmp_path / "charts" / "skills.png"
        )
        weekly = renderer.plot_weekly_comparison(
            analyzer.get_weekly_comparison(now=reference_now), tmp_path / "weekly.png"
        )

        assert skills.exists()
        assert weekly.exists()

    def test_render_report(self, renderer, points, tmp_path):
        paths = renderer.render_report(points, output_dir=tmp_path, prefix="child-1")

        assert [p.name for p in paths] == [
            "child-1_success_rate.png",
            "child-1_response_time.png",
            "child-1_weekly.png",
            "child-1_skills.png",
        ]
        assert all(p.exists() for p in paths)
