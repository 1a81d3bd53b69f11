"""
Collaboration Service

Brand/influencer collaboration lifecycle engine providing:
- Proposal creation with platform fee / payout split
- Guarded lifecycle transitions (contract signature gate)
- Role based action filtering
- Append-only status history
- Optimistic concurrency on every transition
"""

__version__ = "1.0.0"
__service__ = "collaboration_service"
