from __future__ import annotations

from dataclasses import dataclass

from strategy_lab.contexts.backtest_queue.domain.errors import (
    NotificationChannelUnavailableError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    NotificationChannel,
    UserProfileSnapshot,
)

_CHANNEL_ORDER = (
    NotificationChannel.EMAIL,
    NotificationChannel.TELEGRAM,
    NotificationChannel.BOTH,
)
_TELEGRAM_REQUIRED_REASON = "Connect Telegram in your profile to enable this option"


@dataclass(frozen=True, slots=True)
class NotificationOption:
    """
    NotificationOption — one selectable entry of the notification preference control.

    Disabled options are still listed so the user can see what connecting the
    alternate channel would unlock.
    """

    channel: NotificationChannel
    enabled: bool
    disabled_reason: str | None = None


def notification_options(profile: UserProfileSnapshot) -> tuple[NotificationOption, ...]:
    """
    Build the notification preference options for a profile.

    Args:
        profile: Profile snapshot captured when the form was opened.
    Returns:
        tuple[NotificationOption, ...]: email, telegram, both in fixed order.
    Assumptions:
        Email is always available.
    Raises:
        None.
    Side Effects:
        None.
    """
    options: list[NotificationOption] = []
    for channel in _CHANNEL_ORDER:
        enabled = is_channel_available(channel, profile)
        options.append(
            NotificationOption(
                channel=channel,
                enabled=enabled,
                disabled_reason=None if enabled else _TELEGRAM_REQUIRED_REASON,
            )
        )
    return tuple(options)


def default_notification_channel(profile: UserProfileSnapshot) -> NotificationChannel:
    """Return the preselected channel for a new submission."""
    return NotificationChannel.EMAIL


def is_channel_available(channel: NotificationChannel, profile: UserProfileSnapshot) -> bool:
    if channel.requires_telegram:
        return profile.telegram_configured
    return True


def ensure_channel_available(
    channel: NotificationChannel,
    profile: UserProfileSnapshot,
) -> NotificationChannel:
    """
    Validate a chosen channel against the profile.

    Args:
        channel: Channel picked by the user.
        profile: Profile snapshot captured when the form was opened.
    Returns:
        NotificationChannel: The same channel when it is selectable.
    Assumptions:
        None.
    Raises:
        NotificationChannelUnavailableError: If the channel needs Telegram and the
            profile has not configured it.
    Side Effects:
        None.
    """
    if not isinstance(channel, NotificationChannel):
        raise NotificationChannelUnavailableError(f"unsupported notification channel {channel!r}")
    if not is_channel_available(channel, profile):
        raise NotificationChannelUnavailableError(
            f"notification channel {channel.value!r} requires a configured Telegram account"
        )
    return channel
