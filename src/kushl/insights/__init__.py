"""
Platform statistics, featured tasks and popular categories.
"""
from kushl.insights.service import (
    CategoryCount,
    InsightService,
    PlatformStatistics,
    calculate_platform_statistics,
)

__all__ = ["CategoryCount", "InsightService", "PlatformStatistics", "calculate_platform_statistics"]
