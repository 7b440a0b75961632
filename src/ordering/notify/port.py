"""Notification port — abstract interface for pushing events to connected clients."""

from abc import ABC, abstractmethod


class NotificationPort(ABC):
    """Abstract interface for real-time notification adapters."""

    @abstractmethod
    def send_to_user(self, user_id: str, event: str, payload: dict) -> dict:
        """Push ``event`` to every connection that joined the user's room.

        Returns:
            dict with keys: status ("sent" or "failed"), delivered (int), error (optional)
        """
        ...

    @abstractmethod
    def send_to_admins(self, event: str, payload: dict) -> dict:
        """Push ``event`` to every connection in the admin room."""
        ...
