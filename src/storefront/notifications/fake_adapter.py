"""Fake notification sender — records confirmations for testing."""

from storefront.notifications.port import NotificationSender
from storefront.notifications.templates import confirmation_subject, confirmation_text


class FakeNotificationSender(NotificationSender):
    """Sender that records messages in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_error = False

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification delivery failed",
        raise_error: bool = False,
    ):
        """Configure the fake sender behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    async def send(self, order, email: str, name: str) -> bool:
        if self.raise_error:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return False

        self.sent.append(
            {
                "order_id": str(order.id),
                "to": email,
                "name": name,
                "subject": confirmation_subject(order),
                "body": confirmation_text(order, name),
            }
        )
        return True

    def reset(self):
        """Clear sent messages (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_error = False
