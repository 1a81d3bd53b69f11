"""
Collaboration Service Data Repository

Data access layer - PostgreSQL (asyncpg)
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from core.config_manager import ConfigManager
from core.postgres_client import PostgresClientWrapper

from .models import (
    Collaboration,
    CollaborationFilter,
    CollaborationStatus,
    StatusHistoryEntry,
)

logger = logging.getLogger(__name__)


class CollaborationRepository:
    """Collaboration service data repository - PostgreSQL (asyncpg)"""

    COLLABORATION_COLUMNS = (
        "collaboration_id", "campaign_id", "brand_id", "influencer_id", "status",
        "agreed_amount", "platform_fee", "influencer_payout", "currency",
        "start_date", "end_date", "content_due_date", "version",
        "created_at", "updated_at", "completed_at", "cancelled_at",
    )

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        db: Optional[PostgresClientWrapper] = None,
    ):
        if config is None:
            config = ConfigManager("collaboration_service")

        service_config = config.get_service_config()
        self.db = db or PostgresClientWrapper(
            service_name="collaboration_service",
            config=service_config.infra,
        )
        self.schema = service_config.collaboration.db_schema

        # Table names
        self.collaborations_table = "collaborations"
        self.history_table = "collaboration_status_history"

    async def initialize(self):
        """Initialize database connection pool"""
        await self.db.connect()
        logger.info("Collaboration repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection pool"""
        await self.db.close()
        logger.info("Collaboration repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        result = await self.db.health_check()
        return bool(result.get("healthy"))

    # ====================
    # Collaborations
    # ====================

    async def get_collaboration(self, collaboration_id: str) -> Optional[Collaboration]:
        """Get collaboration by ID (history not loaded)"""
        query = f'''
            SELECT * FROM {self.schema}.{self.collaborations_table}
            WHERE collaboration_id = $1
        '''
        row = await self.db.query_row(query, [collaboration_id])
        return self._row_to_collaboration(row) if row else None

    async def create_collaboration(
        self, collaboration: Collaboration, entry: StatusHistoryEntry
    ) -> Collaboration:
        """Insert collaboration and its creation record in one transaction"""
        columns = ", ".join(self.COLLABORATION_COLUMNS)
        placeholders = ", ".join(f"${i}" for i in range(1, len(self.COLLABORATION_COLUMNS) + 1))
        query = f'''
            INSERT INTO {self.schema}.{self.collaborations_table} ({columns})
            VALUES ({placeholders})
        '''

        async with self.db.transaction() as conn:
            await conn.execute(query, *self._collaboration_params(collaboration))
            await self._insert_entry(conn, entry)

        logger.debug(f"Inserted collaboration {collaboration.collaboration_id}")
        return collaboration

    async def compare_and_swap(
        self,
        collaboration_id: str,
        expected_status: CollaborationStatus,
        expected_version: int,
        collaboration: Collaboration,
        entry: StatusHistoryEntry,
    ) -> bool:
        """
        Conditional update plus history insert in one transaction.

        The UPDATE only matches while status and version are still the ones
        the caller read; zero matched rows means another writer won.
        """
        query = f'''
            UPDATE {self.schema}.{self.collaborations_table}
            SET status = $4,
                agreed_amount = $5,
                platform_fee = $6,
                influencer_payout = $7,
                start_date = $8,
                end_date = $9,
                content_due_date = $10,
                version = $11,
                updated_at = $12,
                completed_at = $13,
                cancelled_at = $14
            WHERE collaboration_id = $1 AND status = $2 AND version = $3
        '''

        async with self.db.transaction() as conn:
            result = await conn.execute(
                query,
                collaboration_id,
                expected_status.value,
                expected_version,
                collaboration.status.value,
                collaboration.agreed_amount,
                collaboration.platform_fee,
                collaboration.influencer_payout,
                collaboration.start_date,
                collaboration.end_date,
                collaboration.content_due_date,
                collaboration.version,
                collaboration.updated_at,
                collaboration.completed_at,
                collaboration.cancelled_at,
            )
            if not result.endswith(" 1"):
                logger.debug(
                    f"CAS miss on {collaboration_id}: expected {expected_status.value} v{expected_version}"
                )
                return False

            await self._insert_entry(conn, entry)

        return True

    async def list_collaborations(
        self, filters: CollaborationFilter
    ) -> Tuple[List[Collaboration], int]:
        """List collaborations with filters, newest first"""
        conditions = []
        params: List[Any] = []

        for column in ("status", "campaign_id", "brand_id", "influencer_id"):
            value = getattr(filters, column)
            if value is None:
                continue
            params.append(value.value if isinstance(value, CollaborationStatus) else value)
            conditions.append(f"{column} = ${len(params)}")

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        table = f"{self.schema}.{self.collaborations_table}"

        count_row = await self.db.query_row(
            f"SELECT COUNT(*) AS total FROM {table} {where_clause}", params
        )
        total = int(count_row["total"]) if count_row else 0

        offset = (filters.page - 1) * filters.page_size
        query = f'''
            SELECT * FROM {table}
            {where_clause}
            ORDER BY created_at DESC, collaboration_id DESC
            LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
        '''
        rows = await self.db.query(query, params + [filters.page_size, offset])
        return [self._row_to_collaboration(row) for row in rows], total

    # ====================
    # History
    # ====================

    async def get_status_history(self, collaboration_id: str) -> List[StatusHistoryEntry]:
        """Get history entries ordered by sequence"""
        query = f'''
            SELECT * FROM {self.schema}.{self.history_table}
            WHERE collaboration_id = $1
            ORDER BY sequence ASC
        '''
        rows = await self.db.query(query, [collaboration_id])
        return [self._row_to_entry(row) for row in rows]

    async def _insert_entry(self, conn, entry: StatusHistoryEntry) -> None:
        query = f'''
            INSERT INTO {self.schema}.{self.history_table} (
                entry_id, collaboration_id, sequence, from_status, to_status,
                action, changed_by, reason, metadata, timestamp
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb, $10)
        '''
        await conn.execute(
            query,
            entry.entry_id,
            entry.collaboration_id,
            entry.sequence,
            entry.from_status.value if entry.from_status else None,
            entry.to_status.value,
            entry.action.value if entry.action else None,
            entry.changed_by,
            entry.reason,
            json.dumps(entry.metadata.model_dump(mode="json")),
            entry.timestamp,
        )

    # ====================
    # Row mapping
    # ====================

    def _collaboration_params(self, collaboration: Collaboration) -> List[Any]:
        data = collaboration.model_dump(include=set(self.COLLABORATION_COLUMNS))
        data["status"] = collaboration.status.value
        return [data[column] for column in self.COLLABORATION_COLUMNS]

    @staticmethod
    def _row_to_collaboration(row: Dict[str, Any]) -> Collaboration:
        """Convert database row to Collaboration model"""
        return Collaboration.model_validate(
            {column: row.get(column) for column in CollaborationRepository.COLLABORATION_COLUMNS}
        )

    @staticmethod
    def _row_to_entry(row: Dict[str, Any]) -> StatusHistoryEntry:
        """Convert database row to StatusHistoryEntry model"""
        metadata = row.get("metadata") or {}
        if isinstance(metadata, str):
            metadata = json.loads(metadata)
        if not metadata:
            metadata = {"kind": "none"}

        return StatusHistoryEntry.model_validate({
            "entry_id": row.get("entry_id"),
            "collaboration_id": row.get("collaboration_id"),
            "sequence": row.get("sequence"),
            "from_status": row.get("from_status"),
            "to_status": row.get("to_status"),
            "action": row.get("action"),
            "changed_by": row.get("changed_by"),
            "reason": row.get("reason"),
            "metadata": metadata,
            "timestamp": row.get("timestamp"),
        })


__all__ = ["CollaborationRepository"]
