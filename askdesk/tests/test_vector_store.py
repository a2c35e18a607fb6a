"""Tests for ChromaVectorStore against a mocked Chroma client."""

import pytest
from unittest.mock import Mock

from askdesk.common.vector_store import ChromaVectorStore


@pytest.fixture
def collection():
    collection = Mock()
    collection.query.return_value = {
        "documents": [["Delivery 9am-9pm", "Pickup only"]],
        "metadatas": [[{"location_name": "Main St"}, None]],
        "distances": [[0.25, 0.5]],
    }
    collection.count.return_value = 2
    return collection


@pytest.fixture
def store(collection):
    client = Mock()
    client.get_or_create_collection.return_value = collection
    return ChromaVectorStore(collection="faq", client=client)


class TestChromaVectorStore:
    @pytest.mark.asyncio
    async def test_search_maps_results(self, store, collection):
        payloads = await store.search([0.1, 0.2], limit=2)

        assert payloads == [
            {"location_name": "Main St", "text": "Delivery 9am-9pm", "score": 0.75},
            {"text": "Pickup only", "score": 0.5},
        ]
        assert collection.query.call_args.kwargs["n_results"] == 2

    @pytest.mark.asyncio
    async def test_upsert_splits_text_from_metadata(self, store, collection):
        await store.upsert(4, [0.1, 0.2], {"location_name": "Bole", "text": "Open Sundays"})

        collection.upsert.assert_called_once_with(
            ids=["4"],
            embeddings=[[0.1, 0.2]],
            documents=["Open Sundays"],
            metadatas=[{"location_name": "Bole"}],
        )

    @pytest.mark.asyncio
    async def test_collection_uses_cosine(self, store):
        assert await store.count() == 2
        store._client.get_or_create_collection.assert_called_once_with(
            name="faq", metadata={"hnsw:space": "cosine"},
        )

    @pytest.mark.asyncio
    async def test_reset_recreates_collection(self, store):
        store._client.delete_collection.side_effect = ValueError("does not exist")

        await store.reset(768)

        store._client.delete_collection.assert_called_once_with("faq")
        store._client.get_or_create_collection.assert_called_once()

    @pytest.mark.asyncio
    async def test_empty_result(self, store, collection):
        collection.query.return_value = {"documents": [[]], "metadatas": [[]], "distances": [[]]}
        assert await store.search([0.1]) == []
