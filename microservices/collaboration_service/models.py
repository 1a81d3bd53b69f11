"""
Collaboration Service Data Models

Pydantic models for brand/influencer collaborations, their status history,
transition requests and the structured metadata attached to each history entry.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator


class CollaborationStatus(str, Enum):
    """Collaboration lifecycle status"""
    PROPOSAL_SENT = "PROPOSAL_SENT"
    NEGOTIATION = "NEGOTIATION"
    CONTRACT_SIGNED = "CONTRACT_SIGNED"
    IN_PRODUCTION = "IN_PRODUCTION"
    IN_REVIEW = "IN_REVIEW"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


class CollaborationAction(str, Enum):
    """Actions that move a collaboration through its lifecycle"""
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    COUNTER = "COUNTER"
    SEND_CONTRACT = "SEND_CONTRACT"
    SIGN = "SIGN"
    START_PRODUCTION = "START_PRODUCTION"
    SUBMIT_CONTENT = "SUBMIT_CONTENT"
    SUBMIT_REVISION = "SUBMIT_REVISION"
    APPROVE = "APPROVE"
    REQUEST_REVISION = "REQUEST_REVISION"
    PUBLISH = "PUBLISH"
    RELEASE_PAYMENT = "RELEASE_PAYMENT"
    RESOLVE = "RESOLVE"
    REFUND = "REFUND"


class ActorRole(str, Enum):
    """Role of the caller invoking an action"""
    BRAND = "brand"
    INFLUENCER = "influencer"
    ADMIN = "admin"


class RoleEligibility(str, Enum):
    """Role a transition row is reserved for"""
    BRAND = "brand"
    INFLUENCER = "influencer"
    ADMIN = "admin"
    ANY = "any"


class EscrowAction(str, Enum):
    """Instruction sent to the escrow/wallet service"""
    HOLD = "hold"
    RELEASE = "release"
    REFUND = "refund"


# ====================
# History Metadata
# ====================


class CreationMetadata(BaseModel):
    """Commercial terms captured when the proposal is sent"""
    kind: Literal["creation"] = "creation"
    agreed_amount: Decimal
    platform_fee: Decimal
    influencer_payout: Decimal
    currency: str = "USD"
    campaign_id: Optional[str] = None


class CounterOfferMetadata(BaseModel):
    """Renegotiated amount and/or schedule"""
    kind: Literal["counter_offer"] = "counter_offer"
    proposed_amount: Optional[Decimal] = None
    start_date: Optional[AwareDatetime] = None
    end_date: Optional[AwareDatetime] = None
    content_due_date: Optional[AwareDatetime] = None
    note: Optional[str] = None
    # Filled in by the service once the new split is computed
    platform_fee: Optional[Decimal] = None
    influencer_payout: Optional[Decimal] = None

    @model_validator(mode="after")
    def _require_change(self) -> "CounterOfferMetadata":
        if (
            self.proposed_amount is None
            and self.start_date is None
            and self.end_date is None
            and self.content_due_date is None
        ):
            raise ValueError("counter offer must propose an amount or a date")
        return self


class ContractMetadata(BaseModel):
    """Contract reference for SEND_CONTRACT and SIGN"""
    kind: Literal["contract"] = "contract"
    contract_id: Optional[str] = None
    document_url: Optional[str] = None
    note: Optional[str] = None


class ContentSubmissionMetadata(BaseModel):
    """Content handed in for review"""
    kind: Literal["content_submission"] = "content_submission"
    media_urls: List[str] = Field(default_factory=list)
    caption: Optional[str] = None
    notes: Optional[str] = None


class ReviewMetadata(BaseModel):
    """Brand feedback on submitted content"""
    kind: Literal["review"] = "review"
    feedback: Optional[str] = None
    revision_items: List[str] = Field(default_factory=list)


class PublicationMetadata(BaseModel):
    """Where approved content went live"""
    kind: Literal["publication"] = "publication"
    post_urls: List[str] = Field(default_factory=list)
    platform: Optional[str] = None


class SettlementMetadata(BaseModel):
    """Money movement recorded on payout or refund"""
    kind: Literal["settlement"] = "settlement"
    escrow_action: Optional[EscrowAction] = None
    agreed_amount: Optional[Decimal] = None
    platform_fee: Optional[Decimal] = None
    influencer_payout: Optional[Decimal] = None
    currency: Optional[str] = None
    note: Optional[str] = None


class DisputeResolutionMetadata(BaseModel):
    """Admin outcome of a dispute"""
    kind: Literal["dispute_resolution"] = "dispute_resolution"
    resolution: Optional[str] = None
    note: Optional[str] = None


class NoMetadata(BaseModel):
    kind: Literal["none"] = "none"


CollaborationMetadata = Annotated[
    Union[
        CreationMetadata,
        CounterOfferMetadata,
        ContractMetadata,
        ContentSubmissionMetadata,
        ReviewMetadata,
        PublicationMetadata,
        SettlementMetadata,
        DisputeResolutionMetadata,
        NoMetadata,
    ],
    Field(discriminator="kind"),
]


ACTION_METADATA: Dict[CollaborationAction, Type[BaseModel]] = {
    CollaborationAction.ACCEPT: NoMetadata,
    CollaborationAction.REJECT: ReviewMetadata,
    CollaborationAction.COUNTER: CounterOfferMetadata,
    CollaborationAction.SEND_CONTRACT: ContractMetadata,
    CollaborationAction.SIGN: ContractMetadata,
    CollaborationAction.START_PRODUCTION: NoMetadata,
    CollaborationAction.SUBMIT_CONTENT: ContentSubmissionMetadata,
    CollaborationAction.SUBMIT_REVISION: ContentSubmissionMetadata,
    CollaborationAction.APPROVE: ReviewMetadata,
    CollaborationAction.REQUEST_REVISION: ReviewMetadata,
    CollaborationAction.PUBLISH: PublicationMetadata,
    CollaborationAction.RELEASE_PAYMENT: SettlementMetadata,
    CollaborationAction.RESOLVE: DisputeResolutionMetadata,
    CollaborationAction.REFUND: SettlementMetadata,
}


# ====================
# Core Models
# ====================


class StatusHistoryEntry(BaseModel):
    """One immutable audit record of a status change"""
    model_config = ConfigDict(frozen=True)

    entry_id: str
    collaboration_id: str
    sequence: int = Field(..., ge=1)
    from_status: Optional[CollaborationStatus] = None
    to_status: CollaborationStatus
    action: Optional[CollaborationAction] = None
    changed_by: str
    reason: Optional[str] = None
    metadata: CollaborationMetadata = Field(default_factory=NoMetadata)
    timestamp: datetime


class Collaboration(BaseModel):
    """Core collaboration model"""
    collaboration_id: str
    campaign_id: str
    brand_id: str
    influencer_id: str
    status: CollaborationStatus
    agreed_amount: Decimal
    platform_fee: Decimal
    influencer_payout: Decimal
    currency: str = "USD"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    content_due_date: Optional[datetime] = None
    version: int = Field(default=1, ge=1)
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_balance(self) -> "Collaboration":
        if self.platform_fee + self.influencer_payout != self.agreed_amount:
            raise ValueError(
                f"platform_fee ({self.platform_fee}) + influencer_payout "
                f"({self.influencer_payout}) must equal agreed_amount ({self.agreed_amount})"
            )
        return self

    def party_id(self, role: ActorRole) -> Optional[str]:
        """ID of the party playing a role on this collaboration"""
        if role == ActorRole.BRAND:
            return self.brand_id
        if role == ActorRole.INFLUENCER:
            return self.influencer_id
        return None


# ====================
# Request Models
# ====================


class CollaborationCreateRequest(BaseModel):
    """Create collaboration (send proposal) request"""
    campaign_id: str = Field(..., description="Campaign the collaboration belongs to")
    brand_id: str = Field(..., description="Brand sending the proposal")
    influencer_id: str = Field(..., description="Influencer receiving the proposal")
    agreed_amount: Decimal = Field(..., description="Proposed amount")
    currency: Optional[str] = Field(None, description="Currency, defaults to the configured one")
    start_date: Optional[AwareDatetime] = None
    end_date: Optional[AwareDatetime] = None
    content_due_date: Optional[AwareDatetime] = None
    message: Optional[str] = Field(None, description="Message sent to the influencer")


class TransitionRequest(BaseModel):
    """Transition request"""
    action: CollaborationAction
    reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


# ====================
# Response / Query Models
# ====================


class FeeBreakdown(BaseModel):
    """Platform fee and payout split of an agreed amount"""
    agreed_amount: Decimal
    platform_fee: Decimal
    influencer_payout: Decimal


class AvailableActionsResponse(BaseModel):
    current_status: CollaborationStatus
    available_actions: List[CollaborationAction]


class CollaborationFilter(BaseModel):
    """Collaboration filtering parameters"""
    status: Optional[CollaborationStatus] = None
    campaign_id: Optional[str] = None
    brand_id: Optional[str] = None
    influencer_id: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class CollaborationListResponse(BaseModel):
    """Collaboration list response"""
    collaborations: List[Collaboration]
    total: int
    page: int
    page_size: int
    total_pages: int


__all__ = [
    "CollaborationStatus",
    "CollaborationAction",
    "ActorRole",
    "RoleEligibility",
    "EscrowAction",
    "CreationMetadata",
    "CounterOfferMetadata",
    "ContractMetadata",
    "ContentSubmissionMetadata",
    "ReviewMetadata",
    "PublicationMetadata",
    "SettlementMetadata",
    "DisputeResolutionMetadata",
    "NoMetadata",
    "CollaborationMetadata",
    "ACTION_METADATA",
    "StatusHistoryEntry",
    "Collaboration",
    "CollaborationCreateRequest",
    "TransitionRequest",
    "FeeBreakdown",
    "AvailableActionsResponse",
    "CollaborationFilter",
    "CollaborationListResponse",
]
