from .notification_policy import (
    NotificationOption,
    default_notification_channel,
    ensure_channel_available,
    is_channel_available,
    notification_options,
)
from .stuck_jobs import find_stuck_jobs

__all__ = [
    "NotificationOption",
    "default_notification_channel",
    "ensure_channel_available",
    "find_stuck_jobs",
    "is_channel_available",
    "notification_options",
]
