"""Fake notifier — records notifications for testing."""

from ordering.notify.port import NotificationPort


class FakeNotifier(NotificationPort):
    """Notifier that records notifications in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        """Configure the fake notifier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _record(self, record: dict) -> dict:
        if not self.should_succeed:
            return {"status": "failed", "delivered": 0, "error": self.failure_reason}

        self.sent.append(record)
        return {"status": "sent", "delivered": 1}

    def send_to_user(self, user_id: str, event: str, payload: dict) -> dict:
        return self._record({"audience": "user", "user_id": str(user_id), "event": event, "payload": payload})

    def send_to_admins(self, event: str, payload: dict) -> dict:
        return self._record({"audience": "admins", "user_id": None, "event": event, "payload": payload})

    def events_for_user(self, user_id: str) -> list[dict]:
        return [r for r in self.sent if r["audience"] == "user" and r["user_id"] == str(user_id)]

    def events_for_admins(self) -> list[dict]:
        return [r for r in self.sent if r["audience"] == "admins"]

    def reset(self):
        """Clear recorded notifications (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
