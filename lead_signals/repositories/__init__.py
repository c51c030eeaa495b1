"""
Repositories Layer
Persistence for behavior events, summaries, alert throttling and history.
"""
from .connection import db_manager, get_database, DatabaseManager
from .base import BaseRepository
from .stores import (
    EventStore,
    SummaryStore,
    ThrottleStore,
    AlertHistoryStore,
    TenantConfigProvider,
)
from .events import MongoEventStore
from .summaries import MongoSummaryStore
from .throttle import MongoThrottleStore
from .alerts import MongoAlertHistoryStore
from .tenants import MongoTenantConfigProvider, StaticTenantConfigProvider
from .memory import (
    InMemoryEventStore,
    InMemorySummaryStore,
    InMemoryThrottleStore,
    InMemoryAlertHistoryStore,
)

__all__ = [
    "db_manager",
    "get_database",
    "DatabaseManager",
    "BaseRepository",
    "EventStore",
    "SummaryStore",
    "ThrottleStore",
    "AlertHistoryStore",
    "TenantConfigProvider",
    "MongoEventStore",
    "MongoSummaryStore",
    "MongoThrottleStore",
    "MongoAlertHistoryStore",
    "MongoTenantConfigProvider",
    "StaticTenantConfigProvider",
    "InMemoryEventStore",
    "InMemorySummaryStore",
    "InMemoryThrottleStore",
    "InMemoryAlertHistoryStore",
]
