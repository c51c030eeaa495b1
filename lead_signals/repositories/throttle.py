"""
Alert Throttle Repository
Shared throttle state keyed by (tenant_id, lead_contact). A TTL index on
expires_at lets MongoDB drop entries once the window has passed.
"""
import datetime as dt
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from .base import mongo_errors
from .stores import ThrottleStore
from ..models.alerts import AlertThrottleState
from ..models.base import ensure_utc


class MongoThrottleStore(ThrottleStore):

    collection_name = "alert_throttle"

    def __init__(self, database: AsyncIOMotorDatabase):
        self.collection: AsyncIOMotorCollection = database[self.collection_name]

    async def get_last_alert_at(self, tenant_id: str, lead_contact: str) -> Optional[dt.datetime]:
        async with mongo_errors("throttle lookup"):
            doc = await self.collection.find_one(
                {"tenant_id": tenant_id, "lead_contact": lead_contact}
            )

        if doc is None:
            return None
        return ensure_utc(doc["last_alert_at"])

    async def mark_alerted(
        self,
        tenant_id: str,
        lead_contact: str,
        at: dt.datetime,
        window: dt.timedelta
    ) -> AlertThrottleState:
        state = AlertThrottleState(
            tenant_id=tenant_id,
            lead_contact=lead_contact,
            last_alert_at=at,
            expires_at=at + window
        )

        async with mongo_errors("throttle update"):
            await self.collection.update_one(
                {"tenant_id": tenant_id, "lead_contact": lead_contact},
                {"$set": {"last_alert_at": state.last_alert_at, "expires_at": state.expires_at}},
                upsert=True
            )

        return state
