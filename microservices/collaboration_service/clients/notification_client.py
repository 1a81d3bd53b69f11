"""
Notification Service Client

Client for calling notification_service to tell parties about collaboration changes.
"""

import logging
from typing import Any, Dict

import httpx

from core.service_client_base import BaseServiceClient

logger = logging.getLogger(__name__)


class NotificationClient(BaseServiceClient):
    """Client for notification_service"""

    service_name = "notification_service"
    default_port = 8270
    env_host_key = "NOTIFICATION_SERVICE_HOST"
    env_port_key = "NOTIFICATION_SERVICE_PORT"

    async def notify(self, recipient_id: str, event: Dict[str, Any]) -> bool:
        """
        Send an in-app notification.

        Args:
            recipient_id: User to notify
            event: Collaboration event summary (type, ids, statuses)
        """
        try:
            response = await self.post(
                "/api/v1/notifications",
                json={
                    "user_id": recipient_id,
                    "type": "in_app",
                    "title": event.get("type", "collaboration.update"),
                    "data": event,
                },
            )
            response.raise_for_status()
            return True

        except httpx.HTTPStatusError as e:
            logger.error(f"Error sending notification to {recipient_id}: {e.response.text}")
            raise
