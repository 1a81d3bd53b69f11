"""
Audit Trail

Builds the append-only status history records and checks that a stored
history is consistent with the collaboration it belongs to.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import BaseModel

from .models import (
    Collaboration,
    CollaborationAction,
    CollaborationStatus,
    NoMetadata,
    StatusHistoryEntry,
)

logger = logging.getLogger(__name__)


class AuditTrail:
    """Factory and verifier for StatusHistoryEntry records"""

    @staticmethod
    def new_entry_id() -> str:
        return f"hist_{uuid.uuid4().hex[:16]}"

    def build_entry(
        self,
        collaboration: Collaboration,
        from_status: Optional[CollaborationStatus],
        action: Optional[CollaborationAction],
        changed_by: str,
        reason: Optional[str] = None,
        metadata: Optional[BaseModel] = None,
        timestamp: Optional[datetime] = None,
    ) -> StatusHistoryEntry:
        """
        Build the record for the state ``collaboration`` is now in.

        The sequence is the collaboration version the record produces, so the
        creation record is sequence 1 and every transition adds one.
        """
        return StatusHistoryEntry(
            entry_id=self.new_entry_id(),
            collaboration_id=collaboration.collaboration_id,
            sequence=collaboration.version,
            from_status=from_status,
            to_status=collaboration.status,
            action=action,
            changed_by=changed_by,
            reason=reason,
            metadata=metadata if metadata is not None else NoMetadata(),
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    @staticmethod
    def replay(entries: Sequence[StatusHistoryEntry]) -> Optional[CollaborationStatus]:
        """Status reached by applying the entries in sequence order"""
        status = None
        for entry in sorted(entries, key=lambda e: e.sequence):
            status = entry.to_status
        return status

    @staticmethod
    def verify(collaboration: Collaboration, entries: Sequence[StatusHistoryEntry]) -> List[str]:
        """
        Check a history against its collaboration.

        Returns a list of problems; an empty list means the history is
        complete, contiguous and chained.
        """
        problems: List[str] = []
        ordered = sorted(entries, key=lambda e: e.sequence)

        if len(ordered) != collaboration.version:
            problems.append(
                f"history has {len(ordered)} entries, version is {collaboration.version}"
            )

        previous: Optional[StatusHistoryEntry] = None
        for expected_sequence, entry in enumerate(ordered, start=1):
            if entry.collaboration_id != collaboration.collaboration_id:
                problems.append(f"entry {entry.entry_id} belongs to {entry.collaboration_id}")
            if entry.sequence != expected_sequence:
                problems.append(f"expected sequence {expected_sequence}, found {entry.sequence}")
            if previous is None:
                if entry.from_status is not None or entry.action is not None:
                    problems.append("first entry is not a creation record")
            elif entry.from_status != previous.to_status:
                problems.append(
                    f"entry {entry.sequence} starts at {entry.from_status}, "
                    f"previous ended at {previous.to_status}"
                )
            previous = entry

        if ordered and ordered[-1].to_status != collaboration.status:
            problems.append(
                f"history ends at {ordered[-1].to_status}, collaboration is {collaboration.status}"
            )

        if problems:
            logger.warning(
                f"Audit trail for {collaboration.collaboration_id} inconsistent: {problems}"
            )
        return problems


__all__ = ["AuditTrail"]
