"""Generic Firestore collection access shared by the domain services."""

from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar, cast

import structlog
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore import SERVER_TIMESTAMP, AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.exceptions import StoreException

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Upper bound for prefix range scans; sorts after any character used in names.
PREFIX_SENTINEL = "\uf8ff"


def clean_undefined_values(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None. Firestore would store them as nulls."""
    return {key: value for key, value in data.items() if value is not None}


class DocumentStore(Generic[T]):
    """
    Create, read, update, delete and query documents of one collection.

    Every record returned carries its document id under ``id``. Nothing is
    cached: each call reaches Firestore. Client failures surface as
    ``StoreException``.
    """

    def __init__(self, client: AsyncClient, collection_name: str):
        """Bind the store to a collection of the given client."""
        self.collection_name = collection_name
        self.collection = client.collection(collection_name)

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        """Translate Firestore client failures into StoreException."""
        try:
            yield
        except GoogleAPIError as e:
            logger.error(
                "firestore_operation_failed",
                collection=self.collection_name,
                operation=operation,
                error=str(e),
            )
            raise StoreException(cause=e) from e

    @staticmethod
    def _to_record(snapshot: Any) -> T:
        return cast(T, {"id": snapshot.id, **(snapshot.to_dict() or {})})

    async def _collect(self, snapshots: AsyncIterator[Any]) -> list[T]:
        return [self._to_record(snapshot) async for snapshot in snapshots]

    async def create(self, data: dict[str, Any]) -> tuple[str, T]:
        """
        Add a new document stamped with creation and update times.

        Args:
            data: Document fields; None values are dropped

        Returns:
            The new document id and the stored record
        """
        payload = clean_undefined_values(data)
        payload.pop("id", None)
        payload["createdAt"] = SERVER_TIMESTAMP
        payload["updatedAt"] = SERVER_TIMESTAMP

        with self._store_errors("create"):
            _, doc_ref = await self.collection.add(payload)
            snapshot = await doc_ref.get()

        return doc_ref.id, self._to_record(snapshot)

    async def get_by_id(self, document_id: str) -> T | None:
        """Fetch a document, or None when it does not exist."""
        with self._store_errors("get"):
            snapshot = await self.collection.document(document_id).get()

        if not snapshot.exists:
            return None
        return self._to_record(snapshot)

    async def get_all(self) -> list[T]:
        """Fetch every document of the collection, in no particular order."""
        with self._store_errors("get_all"):
            return await self._collect(self.collection.stream())

    async def update(self, document_id: str, data: dict[str, Any]) -> T | None:
        """
        Shallow-merge fields into an existing document.

        Args:
            document_id: Document to update
            data: Fields to overwrite; None values are dropped

        Returns:
            The merged record, or None when the document does not exist
        """
        doc_ref = self.collection.document(document_id)

        with self._store_errors("update"):
            snapshot = await doc_ref.get()
            if not snapshot.exists:
                return None

            payload = clean_undefined_values(data)
            payload.pop("id", None)
            payload["updatedAt"] = SERVER_TIMESTAMP

            await doc_ref.update(payload)
            updated = await doc_ref.get()

        return self._to_record(updated)

    async def delete(self, document_id: str) -> bool:
        """Delete a document. Returns False when it did not exist."""
        doc_ref = self.collection.document(document_id)

        with self._store_errors("delete"):
            snapshot = await doc_ref.get()
            if not snapshot.exists:
                return False
            await doc_ref.delete()

        return True

    async def query(self, field_path: str, operator: str, value: Any) -> list[T]:
        """
        Fetch documents matching a single field predicate.

        Args:
            field_path: Field to filter on
            operator: Firestore operator such as ``==``, ``<`` or ``>=``
            value: Value to compare with

        Returns:
            Matching records
        """
        query = self.collection.where(filter=FieldFilter(field_path, operator, value))

        with self._store_errors("query"):
            return await self._collect(query.stream())

    async def search(self, field_path: str, term: str) -> list[T]:
        """Fetch documents whose string field starts with ``term`` (case-sensitive)."""
        query = self.collection.where(filter=FieldFilter(field_path, ">=", term)).where(
            filter=FieldFilter(field_path, "<", term + PREFIX_SENTINEL)
        )

        with self._store_errors("search"):
            return await self._collect(query.stream())
