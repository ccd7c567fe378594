"""
Report rendering for PECS analytics.

- charts: Matplotlib/seaborn progress charts saved as PNG
"""

from .charts import ProgressChartRenderer

__all__ = ["ProgressChartRenderer"]
