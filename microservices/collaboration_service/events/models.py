"""
Collaboration Event Data Models

Event type definitions and data structures for collaboration service events.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions
# =============================================================================


class CollaborationEventType(str, Enum):
    """
    Events published by collaboration_service.

    Other services should reference these when subscribing.
    """
    CREATED = "collaboration.created"
    STATUS_CHANGED = "collaboration.status_changed"
    COMPLETED = "collaboration.completed"
    CANCELLED = "collaboration.cancelled"


# =============================================================================
# Event Data Models - Published Events
# =============================================================================


class CollaborationCreatedEventData(BaseModel):
    """collaboration.created event data"""
    collaboration_id: str = Field(..., description="Collaboration ID")
    campaign_id: str = Field(..., description="Campaign ID")
    brand_id: str = Field(..., description="Brand that sent the proposal")
    influencer_id: str = Field(..., description="Influencer receiving the proposal")
    status: str = Field(..., description="Initial status (PROPOSAL_SENT)")
    agreed_amount: Decimal = Field(..., description="Proposed amount")
    platform_fee: Decimal = Field(..., description="Platform fee")
    influencer_payout: Decimal = Field(..., description="Influencer payout")
    currency: str = Field("USD", description="Currency")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CollaborationStatusChangedEventData(BaseModel):
    """collaboration.status_changed event data"""
    collaboration_id: str = Field(..., description="Collaboration ID")
    campaign_id: str = Field(..., description="Campaign ID")
    from_status: str = Field(..., description="Status before the transition")
    to_status: str = Field(..., description="Status after the transition")
    action: str = Field(..., description="Action that caused the transition")
    changed_by: str = Field(..., description="Actor who performed the action")
    reason: Optional[str] = Field(None, description="Reason supplied by the actor")
    version: int = Field(..., description="Collaboration version after the transition")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CollaborationCompletedEventData(BaseModel):
    """collaboration.completed event data"""
    collaboration_id: str = Field(..., description="Collaboration ID")
    campaign_id: str = Field(..., description="Campaign ID")
    brand_id: str = Field(..., description="Brand ID")
    influencer_id: str = Field(..., description="Influencer ID")
    agreed_amount: Decimal = Field(..., description="Final agreed amount")
    platform_fee: Decimal = Field(..., description="Platform fee")
    influencer_payout: Decimal = Field(..., description="Payout released to the influencer")
    currency: str = Field("USD", description="Currency")
    completed_at: Optional[datetime] = Field(None, description="Completion time")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CollaborationCancelledEventData(BaseModel):
    """collaboration.cancelled event data"""
    collaboration_id: str = Field(..., description="Collaboration ID")
    campaign_id: str = Field(..., description="Campaign ID")
    cancelled_by: str = Field(..., description="Actor who cancelled")
    from_status: str = Field(..., description="Status when cancelled")
    action: str = Field(..., description="REJECT or REFUND")
    reason: Optional[str] = Field(None, description="Cancellation reason")
    refunded: bool = Field(False, description="Whether escrowed funds are refunded")
    cancelled_at: Optional[datetime] = Field(None, description="Cancellation time")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


__all__ = [
    "CollaborationEventType",
    "CollaborationCreatedEventData",
    "CollaborationStatusChangedEventData",
    "CollaborationCompletedEventData",
    "CollaborationCancelledEventData",
]
