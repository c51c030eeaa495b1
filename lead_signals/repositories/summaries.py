"""
Monthly Summary Repository
One row per (tenant_id, month), written by upsert only.
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository, mongo_errors
from .stores import SummaryStore
from ..models.base import utcnow
from ..models.events import MonthlySummary
from ..utils.observability import logger


class MongoSummaryStore(BaseRepository[MonthlySummary], SummaryStore):

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "monthly_summaries", MonthlySummary)

    async def upsert_summary(self, summary: MonthlySummary) -> MonthlySummary:
        """
        Overwrite every counter for the key in a single update_one.
        created_at is only written when the row is first inserted.
        """
        summary.updated_at = utcnow()
        fields = summary.model_dump(exclude={"id", "created_at"})

        async with mongo_errors(f"upsert into {self.collection_name}"):
            result = await self.collection.update_one(
                {"tenant_id": summary.tenant_id, "month": summary.month},
                {
                    "$set": fields,
                    "$setOnInsert": {"created_at": summary.created_at},
                },
                upsert=True
            )

        if result.upserted_id is not None:
            summary.id = str(result.upserted_id)

        logger.bind(tenant_id=summary.tenant_id, ai_responses_sent=summary.ai_responses_sent).debug(
            f"Upserted summary {summary.tenant_id} {summary.month}"
        )
        return summary

    async def get_summary(self, tenant_id: str, month: str) -> Optional[MonthlySummary]:
        return await self.find_one({"tenant_id": tenant_id, "month": month})
