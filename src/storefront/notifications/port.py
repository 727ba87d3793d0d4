"""Notification sender port — order confirmation delivery."""

from abc import ABC, abstractmethod


class NotificationSender(ABC):
    """Abstract interface for confirmation senders."""

    @abstractmethod
    async def send(self, order, email: str, name: str) -> bool:
        """Send an order confirmation to a shopper.

        Returns:
            True when the message was accepted for delivery
        """
        ...
