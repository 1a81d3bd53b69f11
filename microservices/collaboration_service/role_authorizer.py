"""
Role Authorizer

Derives which actions a caller role may invoke from a given status, using
the transition table. The result is advisory; the service re-checks every
transition.
"""

from typing import List

from .models import ActorRole, CollaborationAction, CollaborationStatus
from .transition_table import TRANSITIONS


def get_available_actions(
    status: CollaborationStatus, role: ActorRole
) -> List[CollaborationAction]:
    """Actions legal from ``status`` for ``role``, in declaration order"""
    allowed = {
        action
        for (state, action), rule in TRANSITIONS.items()
        if state == status and rule.allows(role)
    }
    return [action for action in CollaborationAction if action in allowed]


def can_perform(
    status: CollaborationStatus, action: CollaborationAction, role: ActorRole
) -> bool:
    return action in get_available_actions(status, role)


__all__ = ["get_available_actions", "can_perform"]
