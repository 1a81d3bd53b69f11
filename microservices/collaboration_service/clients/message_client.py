"""
Message Service Client

Posts messages into the brand/influencer conversation of a collaboration.
"""

import logging
from typing import Any, Dict

import httpx

from core.service_client_base import BaseServiceClient

logger = logging.getLogger(__name__)


class MessageClient(BaseServiceClient):
    """Client for message_service"""

    service_name = "message_service"
    default_port = 8275
    env_host_key = "MESSAGE_SERVICE_HOST"
    env_port_key = "MESSAGE_SERVICE_PORT"

    async def send_message(
        self, collaboration_id: str, sender_id: str, content: str
    ) -> Dict[str, Any]:
        try:
            response = await self.post(
                "/api/v1/messages",
                json={
                    "collaboration_id": collaboration_id,
                    "sender_id": sender_id,
                    "content": content,
                },
            )
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"Error sending message for {collaboration_id}: {e.response.text}")
            raise
