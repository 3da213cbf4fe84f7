"""Relational storage gateway (PostgREST-style REST interface)"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from outbehaving.domain.exceptions import BackendError
from outbehaving.infrastructure.clients.base import BackendClient
from outbehaving.infrastructure.errors import ErrorType
from outbehaving.infrastructure.records import serialize
from outbehaving.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if value is None:
        return "is.null"
    return f"eq.{value}"


class DatabaseClient(BackendClient):
    """Generic CRUD over named collections"""

    def _path(self, collection: str) -> str:
        return f"/rest/v1/{collection}"

    async def query(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Tuple[str, bool]] = None,
        limit: Optional[int] = None,
        select: str = "*",
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows matching equality filters.

        Args:
            filters: column → value, combined with AND
            order: (column, ascending)
            limit: maximum rows
        """
        logger.info("Database query", extra={"table": collection, "filters": dict(filters or {})})

        params: Dict[str, str] = {"select": select}
        for column, value in (filters or {}).items():
            params[column] = _filter_value(value)
        if order:
            column, ascending = order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"
        if limit:
            params["limit"] = str(limit)

        response = await self._request("GET", self._path(collection), f"query {collection}", params=params)
        rows = self._json(response, f"query {collection}")
        if not isinstance(rows, list):
            raise BackendError(f"query {collection} returned a non-list body", ErrorType.SERVER)

        logger.info("Database query successful", extra={"table": collection, "count": len(rows)})
        return rows

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row and return the persisted representation"""
        logger.info("Database insert", extra={"table": collection})
        response = await self._request(
            "POST",
            self._path(collection),
            f"insert {collection}",
            json=serialize(record),
            headers=RETURN_REPRESENTATION,
        )
        row = self._single(self._json(response, f"insert {collection}"), f"insert {collection}")
        logger.info("Database insert successful", extra={"table": collection, "id": row.get("id")})
        return row

    async def update(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Partial update by id; returns the updated row"""
        logger.info("Database update", extra={"table": collection, "id": record_id, "fields": sorted(fields)})
        response = await self._request(
            "PATCH",
            self._path(collection),
            f"update {collection}",
            params={"id": _filter_value(record_id)},
            json=serialize(fields),
            headers=RETURN_REPRESENTATION,
        )
        row = self._single(self._json(response, f"update {collection}"), f"update {collection}")
        logger.info("Database update successful", extra={"table": collection, "id": record_id})
        return row

    async def delete(self, collection: str, record_id: str) -> bool:
        logger.info("Database delete", extra={"table": collection, "id": record_id})
        await self._request(
            "DELETE",
            self._path(collection),
            f"delete {collection}",
            params={"id": _filter_value(record_id)},
        )
        logger.info("Database delete successful", extra={"table": collection, "id": record_id})
        return True

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        rows = await self.query("profiles", filters={"id": user_id}, limit=1)
        return self._single(rows, "get profile")

    async def update_profile(self, user_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        fields = dict(updates)
        fields["updated_at"] = utcnow()
        return await self.update("profiles", user_id, fields)

    @staticmethod
    def _single(body: Any, operation: str) -> Dict[str, Any]:
        # Representation responses are arrays; an empty one means no row matched
        if isinstance(body, list):
            if not body:
                raise BackendError(f"{operation} matched no rows", ErrorType.NOT_FOUND, status_code=404)
            body = body[0]
        if not isinstance(body, dict):
            raise BackendError(f"{operation} returned an unexpected body", ErrorType.SERVER)
        return body
