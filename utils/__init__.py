"""Shared utilities package for the chat gateway"""

from .usage_metrics import USAGE_METRICS, UsageMetrics

__all__ = [
    "USAGE_METRICS",
    "UsageMetrics",
]
