"""
Generic Repository Base Class
Async insert/query helpers shared by the MongoDB stores.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Generic, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..exceptions import PersistenceError
from ..models.base import MongoBaseModel, utcnow
from ..utils.observability import logger

# Generic type for domain models
T = TypeVar("T", bound=MongoBaseModel)


@asynccontextmanager
async def mongo_errors(operation: str) -> AsyncIterator[None]:
    """Re-raise driver errors as PersistenceError so callers catch one type."""
    try:
        yield
    except PyMongoError as e:
        raise PersistenceError(f"{operation} failed: {e}") from e


class BaseRepository(Generic[T]):
    """
    Generic async repository for MongoDB collections.

    Usage:
        class MongoEventStore(BaseRepository[BehaviorEvent], EventStore):
            def __init__(self, database: AsyncIOMotorDatabase):
                super().__init__(database, "behavior_events", BehaviorEvent)
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        collection_name: str,
        model_class: Type[T]
    ):
        """
        Args:
            database: Motor database instance
            collection_name: MongoDB collection name
            model_class: Pydantic model class for type safety
        """
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]
        self.model_class = model_class
        self.collection_name = collection_name

    async def create(self, document: T) -> T:
        """
        Insert a new document. created_at is kept as given (it drives the
        month partition); updated_at is stamped now.

        Returns:
            The created document with `_id` populated

        Raises:
            PersistenceError: If the insert fails
        """
        document.updated_at = utcnow()
        doc_dict = document.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)

        async with mongo_errors(f"insert into {self.collection_name}"):
            result = await self.collection.insert_one(doc_dict)

        logger.debug(
            f"Created document in {self.collection_name}",
            extra={"document_id": str(result.inserted_id)}
        )

        document.id = str(result.inserted_id)
        return document

    async def find_one(self, filter_dict: Dict[str, Any]) -> Optional[T]:
        async with mongo_errors(f"find_one on {self.collection_name}"):
            doc = await self.collection.find_one(filter_dict)

        if doc is None:
            return None

        return self._to_model(doc)

    async def find_many(
        self,
        filter_dict: Dict[str, Any],
        limit: int = 100,
        sort: Optional[List[tuple]] = None
    ) -> List[T]:
        """
        Retrieve multiple documents matching the filter.

        Args:
            filter_dict: MongoDB query filter
            limit: Maximum number of documents to return
            sort: List of (field, direction) tuples for sorting
        """
        cursor = self.collection.find(filter_dict).limit(limit)

        if sort:
            cursor = cursor.sort(sort)

        async with mongo_errors(f"find on {self.collection_name}"):
            docs = await cursor.to_list(length=limit)

        return [self._to_model(doc) for doc in docs]

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        async with mongo_errors(f"aggregate on {self.collection_name}"):
            cursor = self.collection.aggregate(pipeline)
            return await cursor.to_list(length=None)

    def _to_model(self, doc: Dict[str, Any]) -> T:
        """Convert a raw MongoDB document to the model, dropping unknown fields."""
        if "_id" in doc:
            doc["_id"] = str(doc["_id"])

        model_fields = self.model_class.model_fields.keys()
        cleaned_doc = {
            k: v for k, v in doc.items()
            if k in model_fields or k == "_id"
        }

        return self.model_class.model_validate(cleaned_doc)
