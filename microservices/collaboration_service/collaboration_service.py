"""
Collaboration Service Business Logic

Implements the brand/influencer collaboration lifecycle: proposal creation,
guarded state transitions with optimistic concurrency, fee computation,
the audit trail and post-commit side effects.
"""

import asyncio
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ValidationError

from core.config import CollaborationConfig

from .audit_trail import AuditTrail
from .contract_gate import ContractGate
from .events.publishers import CollaborationEventPublisher
from .fee_calculator import calculate_fees
from .models import (
    ACTION_METADATA,
    ActorRole,
    AvailableActionsResponse,
    Collaboration,
    CollaborationAction,
    CollaborationCreateRequest,
    CollaborationFilter,
    CollaborationListResponse,
    CollaborationStatus,
    CounterOfferMetadata,
    CreationMetadata,
    EscrowAction,
    SettlementMetadata,
    StatusHistoryEntry,
    TransitionRequest,
)
from .outbox import SideEffect, SideEffectOutbox
from .protocols import (
    CollaborationRepositoryProtocol,
    ContractClientProtocol,
    EscrowClientProtocol,
    EventBusProtocol,
    MessageClientProtocol,
    NotificationClientProtocol,
    ActionNotPermittedError,
    CollaborationAccessDeniedError,
    CollaborationNotFoundError,
    CollaborationValidationError,
    ConcurrentModificationError,
    InvalidTransitionError,
    InvalidTransitionMetadataError,
)
from .role_authorizer import get_available_actions
from .transition_table import lookup

logger = logging.getLogger(__name__)


class CollaborationService:
    """Collaboration service business logic layer"""

    DEFAULT_CREATION_REASON = "Collaboration initiated"

    def __init__(
        self,
        repository: CollaborationRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        contract_client: Optional[ContractClientProtocol] = None,
        escrow_client: Optional[EscrowClientProtocol] = None,
        notification_client: Optional[NotificationClientProtocol] = None,
        message_client: Optional[MessageClientProtocol] = None,
        config: Optional[CollaborationConfig] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.config = config or CollaborationConfig()
        self.audit_trail = AuditTrail()
        self.contract_gate = ContractGate(contract_client)
        self.event_publisher = CollaborationEventPublisher(event_bus) if event_bus else None
        self.outbox = SideEffectOutbox(
            escrow_client=escrow_client,
            notification_client=notification_client,
            message_client=message_client,
            event_publisher=self.event_publisher,
            max_attempts=self.config.outbox_max_attempts,
        )
        self._dispatch_tasks: Set[asyncio.Task] = set()
        self.dispatch_errors: List[BaseException] = []

    # ====================
    # Creation
    # ====================

    async def create_collaboration(self, request: CollaborationCreateRequest) -> Collaboration:
        """
        Send a proposal from a brand to an influencer.

        Computes the fee split, persists the collaboration in PROPOSAL_SENT
        together with its creation record, then dispatches the proposal
        message, the created event and the influencer notification.
        """
        self._validate_create_request(request)

        fees = calculate_fees(
            request.agreed_amount,
            commission_rate=self.config.commission_rate,
            quantum=self.config.currency_quantum,
        )

        now = datetime.now(timezone.utc)
        currency = request.currency or self.config.currency
        collaboration = Collaboration(
            collaboration_id=f"collab_{uuid.uuid4().hex[:16]}",
            campaign_id=request.campaign_id,
            brand_id=request.brand_id,
            influencer_id=request.influencer_id,
            status=CollaborationStatus.PROPOSAL_SENT,
            agreed_amount=fees.agreed_amount,
            platform_fee=fees.platform_fee,
            influencer_payout=fees.influencer_payout,
            currency=currency,
            start_date=request.start_date,
            end_date=request.end_date,
            content_due_date=request.content_due_date,
            version=1,
            created_at=now,
            updated_at=now,
        )

        entry = self.audit_trail.build_entry(
            collaboration,
            from_status=None,
            action=None,
            changed_by=request.brand_id,
            reason=request.message or self.DEFAULT_CREATION_REASON,
            metadata=CreationMetadata(
                agreed_amount=fees.agreed_amount,
                platform_fee=fees.platform_fee,
                influencer_payout=fees.influencer_payout,
                currency=currency,
                campaign_id=request.campaign_id,
            ),
            timestamp=now,
        )

        await self.repository.create_collaboration(collaboration, entry)
        logger.info(
            f"Collaboration created: {collaboration.collaboration_id} "
            f"(campaign={request.campaign_id}, amount={fees.agreed_amount} {currency})"
        )

        self._dispatch_side_effects(self.outbox.plan_creation(collaboration, request.message))

        return collaboration.model_copy(update={"status_history": [entry]})

    # ====================
    # Transitions
    # ====================

    async def transition_collaboration(
        self,
        collaboration_id: str,
        actor_id: str,
        actor_role: Union[ActorRole, str],
        request: TransitionRequest,
    ) -> Collaboration:
        """
        Apply an action to a collaboration.

        Legality and role are re-derived from the transition table on every
        call. The new state and its history record are written in one
        compare-and-swap against the status and version that were read, so a
        concurrent writer makes this call fail instead of being overwritten.

        Returns:
            The updated collaboration with its full history

        Raises:
            CollaborationNotFoundError, InvalidTransitionError,
            ActionNotPermittedError, CollaborationAccessDeniedError,
            InvalidTransitionMetadataError, ContractNotFullySignedError,
            InvalidAmountError, CollaborationValidationError,
            ConcurrentModificationError
        """
        role = ActorRole(actor_role)
        action = request.action

        current = await self.repository.get_collaboration(collaboration_id)
        if current is None:
            raise CollaborationNotFoundError(collaboration_id)

        rule = lookup(current.status, action)
        if rule is None:
            logger.warning(
                f"Rejected {action.value} on {collaboration_id}: not allowed from {current.status.value}"
            )
            raise InvalidTransitionError(current.status, action)

        if not rule.allows(role):
            logger.warning(f"Rejected {action.value} on {collaboration_id}: role {role.value}")
            raise ActionNotPermittedError(action, role, current.status)

        self._check_party_access(current, actor_id, role)
        metadata = self._parse_metadata(action, request.metadata)

        if ContractGate.applies_to(rule.target):
            await self.contract_gate.check(current)

        now = datetime.now(timezone.utc)
        changes: Dict[str, Any] = {
            "status": rule.target,
            "version": current.version + 1,
            "updated_at": now,
        }
        if rule.target == CollaborationStatus.COMPLETED:
            changes["completed_at"] = now
        elif rule.target == CollaborationStatus.CANCELLED:
            changes["cancelled_at"] = now

        if isinstance(metadata, CounterOfferMetadata):
            terms, metadata = self._apply_counter_offer(current, metadata)
            changes.update(terms)
        elif isinstance(metadata, SettlementMetadata):
            metadata = metadata.model_copy(update={
                "escrow_action": (
                    EscrowAction.REFUND if action == CollaborationAction.REFUND else EscrowAction.RELEASE
                ),
                "agreed_amount": current.agreed_amount,
                "platform_fee": current.platform_fee,
                "influencer_payout": current.influencer_payout,
                "currency": current.currency,
            })

        updated = Collaboration.model_validate(
            {**current.model_dump(exclude={"status_history"}), **changes}
        )
        entry = self.audit_trail.build_entry(
            updated,
            from_status=current.status,
            action=action,
            changed_by=actor_id,
            reason=request.reason,
            metadata=metadata,
            timestamp=now,
        )

        swapped = await self.repository.compare_and_swap(
            collaboration_id, current.status, current.version, updated, entry
        )
        if not swapped:
            logger.warning(
                f"Concurrent modification on {collaboration_id}: "
                f"{action.value} lost against {current.status.value} v{current.version}"
            )
            raise ConcurrentModificationError(collaboration_id, current.status, current.version)

        logger.info(
            f"Collaboration {collaboration_id}: {current.status.value} -> {updated.status.value} "
            f"via {action.value} by {role.value} {actor_id} (v{updated.version})"
        )

        history = await self.repository.get_status_history(collaboration_id)

        self._dispatch_side_effects(self.outbox.plan_transition(updated, entry))

        return updated.model_copy(update={"status_history": history})

    # ====================
    # Queries
    # ====================

    async def get_collaboration(self, collaboration_id: str) -> Collaboration:
        """Get collaboration with its full history"""
        collaboration = await self.repository.get_collaboration(collaboration_id)
        if collaboration is None:
            raise CollaborationNotFoundError(collaboration_id)

        history = await self.repository.get_status_history(collaboration_id)
        return collaboration.model_copy(update={"status_history": history})

    async def list_collaborations(self, filters: CollaborationFilter) -> CollaborationListResponse:
        """List collaborations newest first. Items are returned without history."""
        collaborations, total = await self.repository.list_collaborations(filters)
        return CollaborationListResponse(
            collaborations=collaborations,
            total=total,
            page=filters.page,
            page_size=filters.page_size,
            total_pages=math.ceil(total / filters.page_size) if total else 0,
        )

    async def get_collaboration_history(self, collaboration_id: str) -> List[StatusHistoryEntry]:
        """History entries ordered by sequence"""
        if await self.repository.get_collaboration(collaboration_id) is None:
            raise CollaborationNotFoundError(collaboration_id)
        return await self.repository.get_status_history(collaboration_id)

    async def get_available_actions(
        self, collaboration_id: str, role: Union[ActorRole, str]
    ) -> AvailableActionsResponse:
        collaboration = await self.repository.get_collaboration(collaboration_id)
        if collaboration is None:
            raise CollaborationNotFoundError(collaboration_id)

        return AvailableActionsResponse(
            current_status=collaboration.status,
            available_actions=get_available_actions(collaboration.status, ActorRole(role)),
        )

    async def verify_history(self, collaboration_id: str) -> List[str]:
        """Audit a stored history; an empty list means it is consistent"""
        collaboration = await self.repository.get_collaboration(collaboration_id)
        if collaboration is None:
            raise CollaborationNotFoundError(collaboration_id)

        history = await self.repository.get_status_history(collaboration_id)
        return self.audit_trail.verify(collaboration, history)

    async def flush_side_effects(self) -> int:
        """Retry side effects left pending by earlier calls"""
        return await self.outbox.flush()

    # ====================
    # Background dispatch
    # ====================

    def _dispatch_side_effects(self, effects: List[SideEffect]) -> None:
        """Queue effects and flush them in a tracked task; the caller does not wait"""
        self.outbox.enqueue(effects)
        if not self.outbox.pending:
            return

        task = asyncio.create_task(self.outbox.flush())
        self._dispatch_tasks.add(task)
        task.add_done_callback(self._on_dispatch_done)

    def _on_dispatch_done(self, task: asyncio.Task) -> None:
        self._dispatch_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.dispatch_errors.append(error)
            logger.error(f"Side-effect dispatch task failed: {error}")

    async def drain_side_effects(self, timeout: Optional[float] = None) -> int:
        """
        Wait for in-flight dispatch tasks.

        Tasks still running after the timeout are cancelled; their effects
        stay pending in the outbox. Returns the number of tasks cancelled.
        """
        if not self._dispatch_tasks:
            return 0

        _, still_running = await asyncio.wait(set(self._dispatch_tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(
                f"Cancelled {len(still_running)} side-effect dispatch task(s) still running "
                f"after {timeout}s"
            )
        return len(still_running)

    # ====================
    # Validation helpers
    # ====================

    def _validate_create_request(self, request: CollaborationCreateRequest) -> None:
        for field_name in ("campaign_id", "brand_id", "influencer_id"):
            value = getattr(request, field_name)
            if not value or not value.strip():
                raise CollaborationValidationError(f"{field_name} is required", field_name)

        if request.brand_id == request.influencer_id:
            raise CollaborationValidationError(
                "Brand and influencer must be different parties", "influencer_id"
            )

        self._validate_schedule(request.start_date, request.end_date)

    @staticmethod
    def _validate_schedule(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
        if not (start_date and end_date):
            return
        # Rows written before dates were required to carry an offset
        if (start_date.tzinfo is None) != (end_date.tzinfo is None):
            raise CollaborationValidationError(
                "start_date and end_date must both include a timezone", "end_date"
            )
        if end_date < start_date:
            raise CollaborationValidationError("end_date must not be before start_date", "end_date")

    @staticmethod
    def _check_party_access(collaboration: Collaboration, actor_id: str, role: ActorRole) -> None:
        if role == ActorRole.ADMIN:
            return
        if collaboration.party_id(role) != actor_id:
            logger.warning(
                f"Actor {actor_id} ({role.value}) is not a party to {collaboration.collaboration_id}"
            )
            raise CollaborationAccessDeniedError(actor_id, role)

    @staticmethod
    def _parse_metadata(
        action: CollaborationAction, raw: Optional[Dict[str, Any]]
    ) -> BaseModel:
        """Validate caller metadata against the schema registered for the action"""
        schema = ACTION_METADATA[action]
        kind = schema.model_fields["kind"].default
        data = dict(raw or {})

        if data.setdefault("kind", kind) != kind:
            raise InvalidTransitionMetadataError(action, [{
                "loc": ("kind",),
                "msg": f"expected '{kind}' for {action.value}",
                "type": "kind_mismatch",
            }])

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise InvalidTransitionMetadataError(action, e.errors()) from e

    def _apply_counter_offer(
        self, current: Collaboration, offer: CounterOfferMetadata
    ) -> Tuple[Dict[str, Any], CounterOfferMetadata]:
        """New commercial terms and schedule proposed by a counter offer"""
        terms: Dict[str, Any] = {}

        if offer.proposed_amount is not None:
            fees = calculate_fees(
                offer.proposed_amount,
                commission_rate=self.config.commission_rate,
                quantum=self.config.currency_quantum,
            )
            terms.update(
                agreed_amount=fees.agreed_amount,
                platform_fee=fees.platform_fee,
                influencer_payout=fees.influencer_payout,
            )
            offer = offer.model_copy(update={
                "platform_fee": fees.platform_fee,
                "influencer_payout": fees.influencer_payout,
            })

        for field_name in ("start_date", "end_date", "content_due_date"):
            value = getattr(offer, field_name)
            if value is not None:
                terms[field_name] = value

        self._validate_schedule(
            terms.get("start_date", current.start_date),
            terms.get("end_date", current.end_date),
        )
        return terms, offer


__all__ = ["CollaborationService"]
