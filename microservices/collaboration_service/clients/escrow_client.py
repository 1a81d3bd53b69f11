"""
Escrow Client

Client for calling wallet_service escrow endpoints that hold, release or
refund collaboration funds.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from core.service_client_base import BaseServiceClient

from ..models import EscrowAction

logger = logging.getLogger(__name__)


class EscrowClient(BaseServiceClient):
    """Client for wallet_service escrow"""

    service_name = "wallet_service"
    default_port = 8208
    env_host_key = "WALLET_SERVICE_HOST"
    env_port_key = "WALLET_SERVICE_PORT"

    async def apply_escrow(
        self,
        collaboration_id: str,
        platform_fee: Decimal,
        influencer_payout: Decimal,
        action: EscrowAction,
        currency: str = "USD",
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an escrow instruction.

        Amounts travel as strings to keep exact decimal precision. Retries of
        one instruction carry the same idempotency_key, sent as the
        Idempotency-Key header, so the wallet applies it at most once.
        """
        action = EscrowAction(action)
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        try:
            response = await self.post(
                f"/api/v1/escrow/{collaboration_id}/{action.value}",
                json={
                    "collaboration_id": collaboration_id,
                    "platform_fee": str(platform_fee),
                    "influencer_payout": str(influencer_payout),
                    "currency": currency,
                },
                headers=headers,
            )
            response.raise_for_status()
            logger.info(f"Escrow {action.value} applied for {collaboration_id}")
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"Escrow {action.value} failed for {collaboration_id}: {e.response.text}")
            raise
