"""Notification sender registry — pluggable confirmation delivery.

Uses the fake sender by default; configure via STOREFRONT_NOTIFICATIONS
(``fake`` or ``emailjs``).
"""

from storefront import config

_sender_instance = None


def get_sender():
    """Return the configured notification sender (singleton)."""
    global _sender_instance
    if _sender_instance is None:
        adapter = config.NOTIFICATION_ADAPTER
        if adapter == "fake":
            from storefront.notifications.fake_adapter import FakeNotificationSender

            _sender_instance = FakeNotificationSender()
        elif adapter == "emailjs":
            from storefront.notifications.emailjs_adapter import EmailJSSender

            _sender_instance = EmailJSSender()
        else:
            raise ValueError(f"Unknown notification adapter: {adapter}")
    return _sender_instance


def set_sender(sender):
    """Install a specific sender instance (tests, app wiring)."""
    global _sender_instance
    _sender_instance = sender


def reset_sender():
    """Reset the sender singleton (useful for testing)."""
    global _sender_instance
    _sender_instance = None
