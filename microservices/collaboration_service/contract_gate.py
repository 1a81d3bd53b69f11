"""
Contract Gate

Guard for the transition into CONTRACT_SIGNED: both parties must have signed.
"""

import logging
from typing import Optional

from .models import Collaboration, CollaborationStatus
from .protocols import ContractClientProtocol, ContractNotFullySignedError

logger = logging.getLogger(__name__)


class ContractGate:
    """Checks contract signatures through the contract service"""

    def __init__(self, contract_client: Optional[ContractClientProtocol] = None):
        self.contract_client = contract_client

    @staticmethod
    def applies_to(target: CollaborationStatus) -> bool:
        return target == CollaborationStatus.CONTRACT_SIGNED

    async def check(self, collaboration: Collaboration) -> None:
        """
        Raise ContractNotFullySignedError unless both parties signed.

        Without a contract client nothing can be proven signed, so the gate
        stays closed. Client I/O errors propagate.
        """
        collaboration_id = collaboration.collaboration_id
        if self.contract_client is None:
            logger.warning(f"No contract client configured, refusing to sign {collaboration_id}")
            raise ContractNotFullySignedError(collaboration_id)

        if not await self.contract_client.is_fully_signed(collaboration_id):
            logger.info(f"Contract for {collaboration_id} not fully signed")
            raise ContractNotFullySignedError(collaboration_id)


__all__ = ["ContractGate"]
