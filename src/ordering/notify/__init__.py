"""Notifier registry — the process-wide notification adapter.

Uses the fake notifier by default. The web application installs a
WebSocketNotifier at startup so pushes reach connected clients.
"""

from ordering.notify.port import NotificationPort

_notifier: NotificationPort | None = None


def get_notifier() -> NotificationPort:
    """Return the configured notifier (singleton)."""
    global _notifier
    if _notifier is None:
        from ordering.notify.fake import FakeNotifier

        _notifier = FakeNotifier()
    return _notifier


def configure_notifier(notifier: NotificationPort) -> None:
    global _notifier
    _notifier = notifier


def reset_notifier():
    """Drop the configured notifier (useful for testing)."""
    global _notifier
    _notifier = None
