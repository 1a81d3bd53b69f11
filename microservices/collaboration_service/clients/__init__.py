"""
Collaboration Service Clients

Clients for calling other microservices.
"""

from .contract_client import ContractClient
from .escrow_client import EscrowClient
from .message_client import MessageClient
from .notification_client import NotificationClient

__all__ = [
    "ContractClient",
    "EscrowClient",
    "MessageClient",
    "NotificationClient",
]
