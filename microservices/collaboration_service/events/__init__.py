"""
Collaboration Service Events

Event models and publisher for collaboration service.
"""

from .models import (
    CollaborationEventType,
    CollaborationCreatedEventData,
    CollaborationStatusChangedEventData,
    CollaborationCompletedEventData,
    CollaborationCancelledEventData,
)
from .publishers import CollaborationEventPublisher

__all__ = [
    # Event Types
    "CollaborationEventType",
    # Event Data Models
    "CollaborationCreatedEventData",
    "CollaborationStatusChangedEventData",
    "CollaborationCompletedEventData",
    "CollaborationCancelledEventData",
    # Publisher
    "CollaborationEventPublisher",
]
