"""EmailJS sender — order confirmations through the EmailJS REST API."""

import httpx
import structlog

from storefront import config
from storefront.notifications.port import NotificationSender
from storefront.notifications.templates import template_params

logger = structlog.get_logger(__name__)


class EmailJSSender(NotificationSender):
    def __init__(
        self,
        service_id: str = config.EMAILJS_SERVICE_ID,
        template_id: str = config.EMAILJS_TEMPLATE_ID,
        public_key: str = config.EMAILJS_PUBLIC_KEY,
        url: str = config.EMAILJS_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.url = url
        self.transport = transport

    async def send(self, order, email: str, name: str) -> bool:
        if not (self.service_id and self.template_id and self.public_key):
            logger.error("emailjs_not_configured")
            return False
        if not email:
            logger.warning("confirmation_skipped_no_email", order_id=str(order.id))
            return False

        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": template_params(order, email, name),
        }
        async with httpx.AsyncClient(transport=self.transport, timeout=config.BACKEND_TIMEOUT) as client:
            try:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("confirmation_send_failed", order_id=str(order.id), error=str(exc))
                return False

        logger.info("confirmation_sent", order_id=str(order.id), to=email)
        return True
