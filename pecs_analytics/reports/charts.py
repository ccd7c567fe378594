"""
Progress charts for parents and therapists.

Renders PNG figures from performance data points and trend analyzer results:
- Success rate over time with the fitted trend line
- Average response time over time
- This week vs last week
- Per-phase skill progress

Requires:
    - matplotlib
    - seaborn
"""

from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import seaborn as sns  # noqa: E402

from ..analytics.trend_analyzer import TrendAnalyzer  # noqa: E402
from ..config import config  # noqa: E402
from ..models.performance import (  # noqa: E402
    PerformanceDataPoint,
    SkillBreakdown,
    WeeklyComparison,
)
from ..utils.logger import get_logger  # noqa: E402
from ..utils.stats import linear_regression  # noqa: E402

logger = get_logger(__name__)

LEVEL_COLORS = {
    "mastered": "#2ecc71",
    "developing": "#3498db",
    "emerging": "#f39c12",
    "not_started": "#bdc3c7",
}


class ProgressChartRenderer:
    """Generate progress charts for one child."""

    def __init__(self, style: str = "seaborn-v0_8-darkgrid", dpi: int = 150):
        """
        Initialize renderer.

        Args:
            style: Matplotlib style to use
            dpi: Resolution of saved figures
        """
        plt.style.use(style)
        sns.set_palette("husl")
        self.dpi = dpi

        plt.rcParams.update({
            'font.size': 11,
            'axes.titlesize': 13,
            'axes.labelsize': 11,
            'xtick.labelsize': 10,
            'ytick.labelsize': 10,
            'legend.fontsize': 10,
        })

    def _save(self, fig, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.tight_layout()
        fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)
        logger.debug("Saved chart %s", output_path)
        return output_path

    @staticmethod
    def _no_data(ax, message: str = "No practice data yet"):
        ax.text(0.5, 0.5, message, ha='center', va='center', fontsize=12,
                transform=ax.transAxes, color='gray')
        ax.set_xticks([])
        ax.set_yticks([])

    def plot_success_trend(
        self,
        points: Sequence[PerformanceDataPoint],
        output_path: Path,
        mastery_threshold: Optional[float] = None,
    ) -> Path:
        """Success rate per session with the least-squares trend line."""
        if mastery_threshold is None:
            mastery_threshold = config.trend.mastery_threshold

        points = sorted(points, key=lambda p: p.date)
        fig, ax = plt.subplots(figsize=(10, 5))

        if not points:
            self._no_data(ax)
        else:
            dates = [p.date for p in points]
            rates = np.array([p.success_rate * 100 for p in points])

            ax.plot(dates, rates, marker='o', linewidth=2, label='Success rate')

            if len(points) >= 2:
                fit = linear_regression(rates)
                fitted = fit.intercept + fit.slope * np.arange(len(rates))
                ax.plot(dates, fitted, linestyle='--', color='#7f8c8d',
                        label=f'Trend (R² = {fit.r_squared:.2f})')

            ax.axhline(mastery_threshold * 100, color='#2ecc71', linestyle=':',
                       label=f'Mastery ({mastery_threshold:.0%})')
            ax.set_ylim(0, 105)
            ax.set_ylabel('Success Rate (%)', fontweight='bold')
            ax.legend(loc='lower right')
            fig.autofmt_xdate()

        ax.set_title('Success Rate Over Time', fontweight='bold')
        return self._save(fig, output_path)

    def plot_response_times(
        self,
        points: Sequence[PerformanceDataPoint],
        output_path: Path,
    ) -> Path:
        """Average response time per session, in seconds."""
        points = sorted(points, key=lambda p: p.date)
        fig, ax = plt.subplots(figsize=(10, 5))

        if not points:
            self._no_data(ax)
        else:
            dates = [p.date for p in points]
            seconds = [p.avg_response_time_ms / 1000 for p in points]
            ax.plot(dates, seconds, marker='s', color='#9b59b6', linewidth=2)
            ax.set_ylabel('Avg Response Time (s)', fontweight='bold')
            ax.set_ylim(bottom=0)
            fig.autofmt_xdate()

        ax.set_title('Response Time Over Time', fontweight='bold')
        return self._save(fig, output_path)

    def plot_weekly_comparison(self, comparison: WeeklyComparison, output_path: Path) -> Path:
        """Grouped bars for sessions, success rate and minutes."""
        metrics = ['Sessions', 'Success Rate (%)', 'Minutes']
        this_week = [
            comparison.this_week.sessions,
            comparison.this_week.success_rate * 100,
            comparison.this_week.minutes,
        ]
        last_week = [
            comparison.last_week.sessions,
            comparison.last_week.success_rate * 100,
            comparison.last_week.minutes,
        ]

        fig, axes = plt.subplots(1, 3, figsize=(12, 4))

        for ax, metric, current, previous in zip(axes, metrics, this_week, last_week):
            bars = ax.bar(['Last week', 'This week'], [previous, current],
                          color=['#95a5a6', '#3498db'], alpha=0.85, edgecolor='black')
            for bar in bars:
                height = bar.get_height()
                ax.text(bar.get_x() + bar.get_width() / 2., height, f'{height:.0f}',
                        ha='center', va='bottom', fontweight='bold')
            ax.set_title(metric, fontweight='bold')
            ax.grid(axis='y', alpha=0.3)

        fig.suptitle('This Week vs Last Week', fontweight='bold')
        return self._save(fig, output_path)

    def plot_skill_breakdown(self, breakdown: Sequence[SkillBreakdown], output_path: Path) -> Path:
        """Horizontal progress bars per phase, colored by skill level."""
        fig, ax = plt.subplots(figsize=(10, 5))

        labels = [f"Phase {s.phase}: {s.category}" for s in breakdown]
        progress = [s.progress for s in breakdown]
        colors = [LEVEL_COLORS[s.level] for s in breakdown]

        bars = ax.barh(labels, progress, color=colors, edgecolor='black', alpha=0.9)
        for bar, skill in zip(bars, breakdown):
            ax.text(bar.get_width() + 1, bar.get_y() + bar.get_height() / 2,
                    f'{skill.progress}% ({skill.level.replace("_", " ")})',
                    va='center', fontsize=9)

        ax.invert_yaxis()
        ax.set_xlim(0, 115)
        ax.set_xlabel('Average Success Rate (%)', fontweight='bold')
        ax.set_title('Skill Progress by Phase', fontweight='bold')
        return self._save(fig, output_path)

    def render_report(
        self,
        points: Sequence[PerformanceDataPoint],
        output_dir: Optional[Path] = None,
        prefix: str = "progress",
    ) -> List[Path]:
        """
        Generate all charts for a child's data points.

        Args:
            points: Performance data points
            output_dir: Directory for the PNG files (default: config.paths.reports_dir)
            prefix: File name prefix, e.g. the child id

        Returns:
            List of paths to generated figures
        """
        output_dir = Path(output_dir) if output_dir else config.paths.reports_dir
        analyzer = TrendAnalyzer(points)

        generated = [
            self.plot_success_trend(analyzer.data_points, output_dir / f"{prefix}_success_rate.png"),
            self.plot_response_times(analyzer.data_points, output_dir / f"{prefix}_response_time.png"),
            self.plot_weekly_comparison(
                analyzer.get_weekly_comparison(), output_dir / f"{prefix}_weekly.png"
            ),
            self.plot_skill_breakdown(
                analyzer.analyze_skill_breakdown(), output_dir / f"{prefix}_skills.png"
            ),
        ]

        logger.info("Generated %d charts in %s", len(generated), output_dir)
        return generated
