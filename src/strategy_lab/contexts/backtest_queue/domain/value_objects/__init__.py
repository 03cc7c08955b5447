from .notification_channel import NotificationChannel
from .queue_reports import BacktestQueueStats, BacktestResultSummary
from .user_profile_snapshot import UserProfileSnapshot

__all__ = [
    "BacktestQueueStats",
    "BacktestResultSummary",
    "NotificationChannel",
    "UserProfileSnapshot",
]
