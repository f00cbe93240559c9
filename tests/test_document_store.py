"""Tests for the generic Firestore collection adapter."""

from datetime import datetime

import pytest
from google.api_core.exceptions import ServiceUnavailable

from app.core.exceptions import StoreException
from app.services.document_store import DocumentStore, clean_undefined_values


@pytest.fixture
def store(firestore) -> DocumentStore[dict]:
    return DocumentStore[dict](firestore, "things")


def test_clean_undefined_values():
    """Test that None values are dropped and falsy values kept."""
    assert clean_undefined_values({"a": None, "b": "", "c": 0, "d": "x"}) == {
        "b": "",
        "c": 0,
        "d": "x",
    }


@pytest.mark.asyncio
async def test_create_stamps_timestamps_and_attaches_id(store):
    """Test creating a document."""
    doc_id, record = await store.create({"name": "alpha", "skip": None, "id": "ignored"})

    assert record["id"] == doc_id
    assert record["name"] == "alpha"
    assert "skip" not in record
    assert isinstance(record["createdAt"], datetime)
    assert isinstance(record["updatedAt"], datetime)

    assert await store.get_by_id(doc_id) == record


@pytest.mark.asyncio
async def test_get_by_id_missing_returns_none(store):
    """Test that a missing document is not an error."""
    assert await store.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_update_merges_and_restamps(store):
    """Test a shallow merge update."""
    doc_id, created = await store.create({"name": "alpha", "color": "red"})

    updated = await store.update(doc_id, {"color": "blue", "name": None})

    assert updated["name"] == "alpha"
    assert updated["color"] == "blue"
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] > created["updatedAt"]


@pytest.mark.asyncio
async def test_update_missing_returns_none(store):
    """Test updating a document that does not exist."""
    assert await store.update("missing", {"name": "x"}) is None


@pytest.mark.asyncio
async def test_delete(store):
    """Test deleting present and absent documents."""
    doc_id, _ = await store.create({"name": "alpha"})

    assert await store.delete(doc_id) is True
    assert await store.delete(doc_id) is False
    assert await store.get_by_id(doc_id) is None


@pytest.mark.asyncio
async def test_query_and_get_all(store):
    """Test single-predicate queries."""
    await store.create({"name": "alpha", "rank": 1})
    await store.create({"name": "beta", "rank": 2})
    await store.create({"name": "gamma", "rank": 3})

    assert len(await store.get_all()) == 3
    assert [r["name"] for r in await store.query("name", "==", "beta")] == ["beta"]
    assert sorted(r["name"] for r in await store.query("rank", ">=", 2)) == ["beta", "gamma"]


@pytest.mark.asyncio
async def test_search_is_case_sensitive_prefix(store):
    """Test prefix search semantics."""
    await store.create({"name": "Smith"})
    await store.create({"name": "Smithers"})
    await store.create({"name": "smithy"})
    await store.create({"name": "Jones"})

    names = sorted(r["name"] for r in await store.search("name", "Smith"))

    assert names == ["Smith", "Smithers"]


@pytest.mark.asyncio
async def test_backend_failure_raises_store_exception(store, firestore):
    """Test that client errors are wrapped."""
    firestore.failure = ServiceUnavailable("backend down")

    with pytest.raises(StoreException) as exc_info:
        await store.get_all()

    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value.cause, ServiceUnavailable)
