"""
Alert History Repository
Delivered owner alerts, read back by the dashboard alert history API.
"""
import datetime as dt
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from .stores import AlertHistoryStore
from ..models.alerts import AlertRecord, AlertStats


class MongoAlertHistoryStore(BaseRepository[AlertRecord], AlertHistoryStore):

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "alert_history", AlertRecord)

    async def record_alert(self, record: AlertRecord) -> AlertRecord:
        return await self.create(record)

    async def list_alerts(self, tenant_id: str, owner_contact: str, limit: int) -> List[AlertRecord]:
        return await self.find_many(
            filter_dict={"tenant_id": tenant_id, "owner_contact": owner_contact},
            limit=limit,
            sort=[("sent_at", -1)]
        )

    async def alert_stats(self, tenant_id: str, owner_contact: str, now: dt.datetime) -> AlertStats:
        """Single aggregation pass over the owner's alerts."""
        day_ago = now - dt.timedelta(hours=24)
        week_ago = now - dt.timedelta(days=7)

        rows = await self.aggregate([
            {"$match": {"tenant_id": tenant_id, "owner_contact": owner_contact}},
            {"$group": {
                "_id": None,
                "total": {"$sum": 1},
                "last_24h": {"$sum": {"$cond": [{"$gte": ["$sent_at", day_ago]}, 1, 0]}},
                "last_7d": {"$sum": {"$cond": [{"$gte": ["$sent_at", week_ago]}, 1, 0]}},
                "avg_score": {"$avg": "$lead_score"},
                "max_score": {"$max": "$lead_score"},
            }},
        ])

        if not rows:
            return AlertStats()

        row = rows[0]
        return AlertStats(
            total=row["total"],
            last_24h=row["last_24h"],
            last_7d=row["last_7d"],
            avg_score=round(row["avg_score"] or 0.0, 1),
            max_score=row["max_score"] or 0
        )
