"""
Behavior Event Repository
Append-only event log and month-scoped aggregation.
"""
from typing import Dict, List
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from .stores import EventStore
from ..models.events import BehaviorEvent
from ..utils.observability import logger


class MongoEventStore(BaseRepository[BehaviorEvent], EventStore):
    """
    Events are inserted once and never updated or deleted.
    Queries rely on the (tenant_id, month, event_type) and
    (tenant_id, created_at) indexes created by DatabaseManager.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "behavior_events", BehaviorEvent)

    async def save_event(self, event: BehaviorEvent) -> BehaviorEvent:
        return await self.create(event)

    async def count_by_type(self, tenant_id: str, month: str) -> Dict[str, int]:
        """
        Group-by-count over event_type for one tenant/month.

        Returns:
            Mapping of event_type value to count; kinds with no events are absent
        """
        rows = await self.aggregate([
            {"$match": {"tenant_id": tenant_id, "month": month}},
            {"$group": {"_id": "$event_type", "count": {"$sum": 1}}},
        ])

        counts = {row["_id"]: row["count"] for row in rows}
        logger.bind(tenant_id=tenant_id, month=month, kinds=len(counts)).debug(
            f"Counted events for {tenant_id} {month}"
        )
        return counts

    async def list_recent(self, tenant_id: str, limit: int) -> List[BehaviorEvent]:
        return await self.find_many(
            filter_dict={"tenant_id": tenant_id},
            limit=limit,
            sort=[("created_at", -1)]
        )
