"""
Contract Service Client

Client for calling contract_service to check collaboration contract signatures.
"""

import logging

import httpx

from core.service_client_base import BaseServiceClient

logger = logging.getLogger(__name__)


class ContractClient(BaseServiceClient):
    """Client for contract_service"""

    service_name = "contract_service"
    default_port = 8262
    env_host_key = "CONTRACT_SERVICE_HOST"
    env_port_key = "CONTRACT_SERVICE_PORT"

    async def is_fully_signed(self, collaboration_id: str) -> bool:
        """
        Check whether brand and influencer both signed the contract.

        Returns:
            False when no contract exists yet (404)

        Raises:
            httpx.HTTPStatusError: on any other non-2xx response
        """
        try:
            response = await self.get(f"/api/v1/contracts/collaborations/{collaboration_id}")
            if response.status_code == 404:
                logger.debug(f"No contract found for collaboration {collaboration_id}")
                return False
            response.raise_for_status()
            contract = response.json()
            return bool(contract.get("brand_signed")) and bool(contract.get("influencer_signed"))

        except httpx.HTTPStatusError as e:
            logger.error(f"Error checking contract for {collaboration_id}: {e.response.text}")
            raise
