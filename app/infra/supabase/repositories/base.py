"""Base repository with common CRUD operations"""
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import httpx
from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client

from app.infra.supabase.errors import BackendUnavailable

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)
UpdateT = TypeVar('UpdateT', bound=BaseModel)

# PostgreSQL "invalid_text_representation", e.g. a malformed uuid in a filter
INVALID_TEXT_REPRESENTATION = "22P02"

# PostgreSQL resolves this literal to the transaction timestamp
SERVER_NOW = "now"


def _is_malformed_id(error: BackendUnavailable) -> bool:
    cause = error.__cause__
    return isinstance(cause, APIError) and cause.code == INVALID_TEXT_REPRESENTATION


class BaseRepository(Generic[T, UpdateT]):
    """
    Base repository providing common database operations.
    Hides Supabase implementation details from the rest of the application.
    Every PostgREST or transport failure surfaces as BackendUnavailable.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _to_model(self, data: Dict[str, Any]) -> T:
        """Convert database dict to domain model"""
        return self._model_class(**data)

    def _to_models(self, data: List[Dict[str, Any]]) -> List[T]:
        """Convert list of database dicts to domain models"""
        return [self._to_model(item) for item in data]

    def _execute(self, query, action: str):
        """Run a PostgREST query, translating failures into BackendUnavailable"""
        try:
            return query.execute()
        except APIError as e:
            logger.error(f"{self._table_name}: {action} failed: {e.message}")
            raise BackendUnavailable(f"{action} failed: {e.message}") from e
        except httpx.HTTPError as e:
            logger.error(f"{self._table_name}: {action} failed: {e}")
            raise BackendUnavailable(f"{action} failed: {e}") from e

    async def find_by_id(self, id: str) -> Optional[T]:
        """Find a single record by ID, None when it does not exist"""
        query = self._client.table(self._table_name).select("*").eq("id", id)
        try:
            response = self._execute(query, "find_by_id")
        except BackendUnavailable as e:
            if _is_malformed_id(e):
                return None
            raise

        if not response.data:
            return None

        return self._to_model(response.data[0])

    async def find_by_filters(self, filters: Dict[str, Any], limit: Optional[int] = None) -> List[T]:
        """Find records matching equality filters"""
        query = self._client.table(self._table_name).select("*")

        for key, value in filters.items():
            query = query.eq(key, value)

        if limit:
            query = query.limit(limit)

        response = self._execute(query, "find_by_filters")
        return self._to_models(response.data)

    async def insert(self, data: Dict[str, Any]) -> T:
        """Insert a new record and return it as stored"""
        query = self._client.table(self._table_name).insert(data)
        response = self._execute(query, "insert")

        if not response.data:
            raise BackendUnavailable("insert returned no record")

        return self._to_model(response.data[0])

    async def update(
        self,
        id: str,
        data: UpdateT,
        filters: Optional[Dict[str, Any]] = None
    ) -> Optional[T]:
        """Update a record by ID; updated_at is always stamped by the server"""
        data_dict = data.model_dump(exclude_unset=True, mode='json')
        data_dict["updated_at"] = SERVER_NOW

        query = self._client.table(self._table_name).update(data_dict).eq("id", id)
        for key, value in (filters or {}).items():
            query = query.eq(key, value)

        try:
            response = self._execute(query, "update")
        except BackendUnavailable as e:
            if _is_malformed_id(e):
                return None
            raise

        if not response.data:
            return None

        return self._to_model(response.data[0])

    async def delete(self, id: str, filters: Optional[Dict[str, Any]] = None) -> bool:
        """Delete a record by ID. Deleting a missing record is not an error."""
        query = self._client.table(self._table_name).delete().eq("id", id)
        for key, value in (filters or {}).items():
            query = query.eq(key, value)

        try:
            response = self._execute(query, "delete")
        except BackendUnavailable as e:
            if _is_malformed_id(e):
                return False
            raise

        return len(response.data) > 0
