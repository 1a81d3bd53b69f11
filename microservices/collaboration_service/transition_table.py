"""
Collaboration Transition Table

Single source of truth for lifecycle legality: which action is allowed from
which status, where it leads, who may invoke it and whether it is guarded.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from .models import (
    ActorRole,
    CollaborationAction,
    CollaborationStatus,
    RoleEligibility,
)


class Guard:
    """Named guard conditions evaluated before a transition applies"""
    CONTRACT_SIGNED = "contract_fully_signed"


@dataclass(frozen=True)
class TransitionRule:
    """One row of the table"""
    target: CollaborationStatus
    role: RoleEligibility
    guard: Optional[str] = None

    def allows(self, role: ActorRole) -> bool:
        if role == ActorRole.ADMIN or self.role == RoleEligibility.ANY:
            return True
        return self.role.value == role.value


S = CollaborationStatus
A = CollaborationAction
R = RoleEligibility

_ROWS: Dict[Tuple[CollaborationStatus, CollaborationAction], TransitionRule] = {
    (S.PROPOSAL_SENT, A.ACCEPT): TransitionRule(S.NEGOTIATION, R.INFLUENCER),
    (S.PROPOSAL_SENT, A.COUNTER): TransitionRule(S.NEGOTIATION, R.INFLUENCER),
    (S.PROPOSAL_SENT, A.REJECT): TransitionRule(S.CANCELLED, R.ANY),

    (S.NEGOTIATION, A.COUNTER): TransitionRule(S.NEGOTIATION, R.ANY),
    (S.NEGOTIATION, A.SEND_CONTRACT): TransitionRule(S.NEGOTIATION, R.BRAND),
    (S.NEGOTIATION, A.SIGN): TransitionRule(S.CONTRACT_SIGNED, R.ANY, Guard.CONTRACT_SIGNED),
    (S.NEGOTIATION, A.REJECT): TransitionRule(S.CANCELLED, R.ANY),

    (S.CONTRACT_SIGNED, A.START_PRODUCTION): TransitionRule(S.IN_PRODUCTION, R.INFLUENCER),
    (S.CONTRACT_SIGNED, A.REFUND): TransitionRule(S.CANCELLED, R.BRAND),

    (S.IN_PRODUCTION, A.SUBMIT_CONTENT): TransitionRule(S.IN_REVIEW, R.INFLUENCER),
    (S.IN_PRODUCTION, A.SUBMIT_REVISION): TransitionRule(S.IN_REVIEW, R.INFLUENCER),
    (S.IN_PRODUCTION, A.REFUND): TransitionRule(S.CANCELLED, R.ADMIN),

    (S.IN_REVIEW, A.APPROVE): TransitionRule(S.IN_REVIEW, R.BRAND),
    (S.IN_REVIEW, A.PUBLISH): TransitionRule(S.IN_REVIEW, R.INFLUENCER),
    (S.IN_REVIEW, A.REQUEST_REVISION): TransitionRule(S.IN_PRODUCTION, R.BRAND),
    (S.IN_REVIEW, A.RELEASE_PAYMENT): TransitionRule(S.COMPLETED, R.BRAND),
    (S.IN_REVIEW, A.REJECT): TransitionRule(S.DISPUTED, R.BRAND),
    (S.IN_REVIEW, A.REFUND): TransitionRule(S.CANCELLED, R.ADMIN),

    (S.DISPUTED, A.RESOLVE): TransitionRule(S.IN_REVIEW, R.ADMIN),
    (S.DISPUTED, A.RELEASE_PAYMENT): TransitionRule(S.COMPLETED, R.ADMIN),
    (S.DISPUTED, A.REFUND): TransitionRule(S.CANCELLED, R.ADMIN),
}

del S, A, R

TRANSITIONS: Mapping[Tuple[CollaborationStatus, CollaborationAction], TransitionRule] = (
    MappingProxyType(_ROWS)
)


def lookup(
    status: CollaborationStatus, action: CollaborationAction
) -> Optional[TransitionRule]:
    """Row for (status, action), or None when the action is illegal there"""
    # Plain strings hash like str-backed members; only enum members are keys
    if not isinstance(status, CollaborationStatus) or not isinstance(action, CollaborationAction):
        return None
    return TRANSITIONS.get((status, action))


def actions_from(status: CollaborationStatus) -> FrozenSet[CollaborationAction]:
    """Every action with a row for this status"""
    return frozenset(action for (state, action) in TRANSITIONS if state == status)


def is_terminal(status: CollaborationStatus) -> bool:
    """A status is terminal when the table has no rows for it"""
    return not actions_from(status)


def terminal_statuses() -> FrozenSet[CollaborationStatus]:
    return frozenset(status for status in CollaborationStatus if is_terminal(status))


__all__ = [
    "Guard",
    "TransitionRule",
    "TRANSITIONS",
    "lookup",
    "actions_from",
    "is_terminal",
    "terminal_statuses",
]
