"""Credit usage monitoring."""

from .monitor import UsageLevel, UsageMonitor, UsageNotice

__all__ = ["UsageMonitor", "UsageNotice", "UsageLevel"]
