"""Business services."""

from navtracker.services.daily_pipeline import DailyPipeline, PipelineResult, PipelineStatus
from navtracker.services.notifier import EmailNotifier, LogNotifier

__all__ = [
    "DailyPipeline",
    "PipelineResult",
    "PipelineStatus",
    "EmailNotifier",
    "LogNotifier",
]
