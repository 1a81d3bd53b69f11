"""
Side-Effect Outbox

Plans the side effects of a committed state change (escrow instruction,
party notifications, proposal message, domain events) and dispatches them
after the commit. Each effect is isolated: a failure is logged and the
effect stays pending for the next flush until it runs out of attempts.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .events.models import CollaborationEventType
from .events.publishers import CollaborationEventPublisher
from .models import (
    Collaboration,
    CollaborationAction,
    CollaborationStatus,
    EscrowAction,
    StatusHistoryEntry,
)
from .protocols import (
    EscrowClientProtocol,
    MessageClientProtocol,
    NotificationClientProtocol,
)

logger = logging.getLogger(__name__)


class SideEffectKind(str, Enum):
    ESCROW = "escrow"
    NOTIFICATION = "notification"
    MESSAGE = "message"
    EVENT = "event"


@dataclass
class SideEffect:
    """One pending post-commit effect"""
    kind: SideEffectKind
    collaboration_id: str
    payload: Dict[str, Any]
    effect_id: str = field(default_factory=lambda: f"fx_{uuid.uuid4().hex[:16]}")
    attempts: int = 0
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SideEffectOutbox:
    """In-process outbox for collaboration side effects"""

    def __init__(
        self,
        escrow_client: Optional[EscrowClientProtocol] = None,
        notification_client: Optional[NotificationClientProtocol] = None,
        message_client: Optional[MessageClientProtocol] = None,
        event_publisher: Optional[CollaborationEventPublisher] = None,
        max_attempts: int = 5,
    ):
        self.escrow_client = escrow_client
        self.notification_client = notification_client
        self.message_client = message_client
        self.event_publisher = event_publisher
        self.max_attempts = max_attempts
        self._pending: List[SideEffect] = []
        self._dead_letters: List[SideEffect] = []
        self._flush_lock = asyncio.Lock()

    @property
    def pending(self) -> List[SideEffect]:
        return list(self._pending)

    @property
    def dead_letters(self) -> List[SideEffect]:
        """Effects that exhausted their attempts"""
        return list(self._dead_letters)

    # ====================
    # Planning
    # ====================

    def plan_creation(
        self, collaboration: Collaboration, message: Optional[str] = None
    ) -> List[SideEffect]:
        """Effects of a newly sent proposal"""
        collaboration_id = collaboration.collaboration_id
        effects: List[SideEffect] = []

        if message and self.message_client:
            effects.append(SideEffect(
                kind=SideEffectKind.MESSAGE,
                collaboration_id=collaboration_id,
                payload={"sender_id": collaboration.brand_id, "content": message},
            ))

        if self.event_publisher:
            effects.append(self._event_effect(
                collaboration_id,
                CollaborationEventType.CREATED,
                CollaborationEventPublisher.created_data(collaboration),
            ))

        if self.notification_client:
            effects.append(SideEffect(
                kind=SideEffectKind.NOTIFICATION,
                collaboration_id=collaboration_id,
                payload={
                    "recipient_id": collaboration.influencer_id,
                    "event": {
                        "type": CollaborationEventType.CREATED.value,
                        "collaboration_id": collaboration_id,
                        "campaign_id": collaboration.campaign_id,
                        "status": collaboration.status.value,
                        "actor_id": collaboration.brand_id,
                        "agreed_amount": str(collaboration.agreed_amount),
                        "currency": collaboration.currency,
                    },
                },
            ))

        return effects

    def plan_transition(
        self, collaboration: Collaboration, entry: StatusHistoryEntry
    ) -> List[SideEffect]:
        """Effects of an accepted transition"""
        collaboration_id = collaboration.collaboration_id
        effects: List[SideEffect] = []

        escrow_action = self.escrow_action_for(entry)
        if escrow_action and self.escrow_client:
            effects.append(SideEffect(
                kind=SideEffectKind.ESCROW,
                collaboration_id=collaboration_id,
                payload={
                    "platform_fee": collaboration.platform_fee,
                    "influencer_payout": collaboration.influencer_payout,
                    "action": escrow_action,
                    "currency": collaboration.currency,
                },
            ))

        if self.notification_client:
            event = {
                "type": CollaborationEventType.STATUS_CHANGED.value,
                "collaboration_id": collaboration_id,
                "campaign_id": collaboration.campaign_id,
                "from_status": entry.from_status.value,
                "to_status": entry.to_status.value,
                "action": entry.action.value,
                "actor_id": entry.changed_by,
                "reason": entry.reason,
            }
            for recipient_id in (collaboration.brand_id, collaboration.influencer_id):
                if recipient_id == entry.changed_by:
                    continue
                effects.append(SideEffect(
                    kind=SideEffectKind.NOTIFICATION,
                    collaboration_id=collaboration_id,
                    payload={"recipient_id": recipient_id, "event": dict(event)},
                ))

        if self.event_publisher:
            effects.append(self._event_effect(
                collaboration_id,
                CollaborationEventType.STATUS_CHANGED,
                CollaborationEventPublisher.status_changed_data(collaboration, entry),
            ))
            if collaboration.status == CollaborationStatus.COMPLETED:
                effects.append(self._event_effect(
                    collaboration_id,
                    CollaborationEventType.COMPLETED,
                    CollaborationEventPublisher.completed_data(collaboration),
                ))
            elif collaboration.status == CollaborationStatus.CANCELLED:
                effects.append(self._event_effect(
                    collaboration_id,
                    CollaborationEventType.CANCELLED,
                    CollaborationEventPublisher.cancelled_data(collaboration, entry),
                ))

        return effects

    @staticmethod
    def escrow_action_for(entry: StatusHistoryEntry) -> Optional[EscrowAction]:
        """Escrow instruction implied by a history entry, if any"""
        if entry.action == CollaborationAction.REFUND:
            return EscrowAction.REFUND
        if entry.action == CollaborationAction.RELEASE_PAYMENT:
            return EscrowAction.RELEASE
        if entry.to_status == CollaborationStatus.CONTRACT_SIGNED:
            return EscrowAction.HOLD
        return None

    @staticmethod
    def _event_effect(
        collaboration_id: str,
        event_type: CollaborationEventType,
        data: Dict[str, Any],
    ) -> SideEffect:
        return SideEffect(
            kind=SideEffectKind.EVENT,
            collaboration_id=collaboration_id,
            payload={"event_type": event_type.value, "data": data},
        )

    # ====================
    # Dispatch
    # ====================

    def enqueue(self, effects: List[SideEffect]) -> None:
        self._pending.extend(effects)

    async def flush(self) -> int:
        """
        Dispatch every pending effect once.

        Returns the number of effects delivered. Failed effects stay pending
        until they reach max_attempts, then move to the dead letters. Flushes
        are serialized; an effect leaves the pending list only once it is
        delivered or dead-lettered, so a cancelled flush loses nothing.
        """
        async with self._flush_lock:
            delivered = 0

            for effect in list(self._pending):
                effect.attempts += 1
                try:
                    await self._dispatch(effect)
                except Exception as e:
                    effect.last_error = str(e)
                    logger.error(
                        f"Side effect {effect.kind.value} for {effect.collaboration_id} failed "
                        f"(attempt {effect.attempts}/{self.max_attempts}): {e}"
                    )
                    if effect.attempts >= self.max_attempts:
                        self._pending.remove(effect)
                        self._dead_letters.append(effect)
                    continue

                self._pending.remove(effect)
                delivered += 1

            return delivered

    async def _dispatch(self, effect: SideEffect) -> None:
        payload = effect.payload

        if effect.kind == SideEffectKind.ESCROW:
            await self.escrow_client.apply_escrow(
                effect.collaboration_id,
                payload["platform_fee"],
                payload["influencer_payout"],
                payload["action"],
                payload["currency"],
                idempotency_key=effect.effect_id,
            )
        elif effect.kind == SideEffectKind.NOTIFICATION:
            await self.notification_client.notify(payload["recipient_id"], payload["event"])
        elif effect.kind == SideEffectKind.MESSAGE:
            await self.message_client.send_message(
                effect.collaboration_id, payload["sender_id"], payload["content"]
            )
        elif effect.kind == SideEffectKind.EVENT:
            event_type = CollaborationEventType(payload["event_type"])
            if not await self.event_publisher.publish(event_type, payload["data"]):
                raise RuntimeError(f"Event {event_type.value} was not published")


__all__ = ["SideEffectKind", "SideEffect", "SideEffectOutbox"]
