"""
Tenant Alert Configuration Providers
Read-only; the account/settings system owns these documents.
"""
from typing import Dict, Iterable, Optional
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from .base import mongo_errors
from .stores import TenantConfigProvider
from ..models.alerts import TenantAlertConfig


class MongoTenantConfigProvider(TenantConfigProvider):
    """Reads tenant_alert_configs; unknown fields on the stored document are ignored."""

    collection_name = "tenant_alert_configs"

    def __init__(self, database: AsyncIOMotorDatabase):
        self.collection: AsyncIOMotorCollection = database[self.collection_name]

    async def get_config(self, tenant_id: str) -> Optional[TenantAlertConfig]:
        async with mongo_errors("tenant config lookup"):
            doc = await self.collection.find_one({"tenant_id": tenant_id}, {"_id": 0})

        if doc is None:
            return None
        return TenantAlertConfig.model_validate(doc)


class StaticTenantConfigProvider(TenantConfigProvider):
    """Fixed configs, for tests and single-tenant deployments."""

    def __init__(self, configs: Iterable[TenantAlertConfig] = ()):
        self._configs: Dict[str, TenantAlertConfig] = {c.tenant_id: c for c in configs}

    def set_config(self, config: TenantAlertConfig) -> None:
        self._configs[config.tenant_id] = config

    async def get_config(self, tenant_id: str) -> Optional[TenantAlertConfig]:
        return self._configs.get(tenant_id)
