"""
Collaboration Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .models import (
    ActorRole,
    Collaboration,
    CollaborationAction,
    CollaborationFilter,
    CollaborationStatus,
    EscrowAction,
    StatusHistoryEntry,
)


# ====================
# Repository Protocol
# ====================


class CollaborationRepositoryProtocol(Protocol):
    """Protocol for collaboration data repository"""

    async def get_collaboration(self, collaboration_id: str) -> Optional[Collaboration]:
        """Load collaboration by ID (without history)"""
        ...

    async def create_collaboration(
        self, collaboration: Collaboration, entry: StatusHistoryEntry
    ) -> Collaboration:
        """Persist a new collaboration and its creation record atomically"""
        ...

    async def compare_and_swap(
        self,
        collaboration_id: str,
        expected_status: CollaborationStatus,
        expected_version: int,
        collaboration: Collaboration,
        entry: StatusHistoryEntry,
    ) -> bool:
        """
        Write the new state and append the history entry only if the stored
        status and version still match. Returns False on conflict.
        """
        ...

    async def get_status_history(self, collaboration_id: str) -> List[StatusHistoryEntry]:
        """Get history entries ordered by sequence"""
        ...

    async def list_collaborations(
        self, filters: CollaborationFilter
    ) -> Tuple[List[Collaboration], int]:
        """List collaborations newest first, returns (page, total)"""
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for event bus"""

    async def publish_event(self, event: Any) -> bool:
        """Publish an event"""
        ...


# ====================
# Client Protocols
# ====================


class ContractClientProtocol(Protocol):
    """Protocol for contract service client"""

    async def is_fully_signed(self, collaboration_id: str) -> bool:
        """True when both brand and influencer signed the contract"""
        ...


class EscrowClientProtocol(Protocol):
    """Protocol for escrow/wallet service client"""

    async def apply_escrow(
        self,
        collaboration_id: str,
        platform_fee: Decimal,
        influencer_payout: Decimal,
        action: EscrowAction,
        currency: str = "USD",
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Hold, release or refund the collaboration funds"""
        ...


class NotificationClientProtocol(Protocol):
    """Protocol for notification service client"""

    async def notify(self, recipient_id: str, event: Dict[str, Any]) -> bool:
        """Notify a party about a collaboration event"""
        ...


class MessageClientProtocol(Protocol):
    """Protocol for messaging service client"""

    async def send_message(
        self, collaboration_id: str, sender_id: str, content: str
    ) -> Dict[str, Any]:
        """Post a message into the collaboration conversation"""
        ...


# ====================
# Custom Exceptions
# ====================


class CollaborationServiceError(Exception):
    """Base exception for collaboration service errors"""
    pass


class CollaborationNotFoundError(CollaborationServiceError):
    """Raised when collaboration is not found"""

    def __init__(self, collaboration_id: str):
        super().__init__(f"Collaboration not found: {collaboration_id}")
        self.collaboration_id = collaboration_id


class CollaborationValidationError(CollaborationServiceError):
    """Raised when collaboration input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidAmountError(CollaborationValidationError):
    """Raised when an amount is not a positive, exact currency value"""

    def __init__(self, message: str, amount: Any = None):
        super().__init__(message, field="agreed_amount")
        self.amount = amount


class InvalidTransitionError(CollaborationServiceError):
    """Raised when the action is not legal from the current status"""

    def __init__(self, current_status: CollaborationStatus, action: CollaborationAction):
        super().__init__(
            f"Invalid transition: {action.value} is not allowed from {current_status.value}"
        )
        self.current_status = current_status
        self.action = action


class ActionNotPermittedError(CollaborationServiceError):
    """Raised when the caller's role may not perform a legal action"""

    def __init__(
        self,
        action: CollaborationAction,
        role: ActorRole,
        current_status: CollaborationStatus,
    ):
        super().__init__(
            f"Role {role.value} may not perform {action.value} from {current_status.value}"
        )
        self.action = action
        self.role = role
        self.current_status = current_status


class CollaborationAccessDeniedError(CollaborationServiceError):
    """Raised when the actor is not the party named by their role"""

    def __init__(self, actor_id: str, role: ActorRole):
        super().__init__(f"Actor {actor_id} is not the {role.value} of this collaboration")
        self.actor_id = actor_id
        self.role = role


class InvalidTransitionMetadataError(CollaborationServiceError):
    """Raised when transition metadata does not match the action's schema"""

    def __init__(self, action: CollaborationAction, errors: List[Dict[str, Any]]):
        super().__init__(f"Invalid metadata for {action.value}: {errors}")
        self.action = action
        self.errors = errors


class ContractNotFullySignedError(CollaborationServiceError):
    """Raised when signing is attempted before both parties signed"""

    def __init__(self, collaboration_id: str):
        super().__init__(
            f"Contract for collaboration {collaboration_id} is not signed by both parties"
        )
        self.collaboration_id = collaboration_id


class ConcurrentModificationError(CollaborationServiceError):
    """Raised when another writer changed the collaboration first"""

    def __init__(
        self,
        collaboration_id: str,
        expected_status: CollaborationStatus,
        expected_version: int,
    ):
        super().__init__(
            f"Collaboration {collaboration_id} was modified concurrently "
            f"(expected {expected_status.value} v{expected_version})"
        )
        self.collaboration_id = collaboration_id
        self.expected_status = expected_status
        self.expected_version = expected_version


__all__ = [
    "CollaborationRepositoryProtocol",
    "EventBusProtocol",
    "ContractClientProtocol",
    "EscrowClientProtocol",
    "NotificationClientProtocol",
    "MessageClientProtocol",
    "CollaborationServiceError",
    "CollaborationNotFoundError",
    "CollaborationValidationError",
    "InvalidAmountError",
    "InvalidTransitionError",
    "ActionNotPermittedError",
    "CollaborationAccessDeniedError",
    "InvalidTransitionMetadataError",
    "ContractNotFullySignedError",
    "ConcurrentModificationError",
]
