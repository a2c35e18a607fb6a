"""Tests for the retrieval store adapter."""

import logging

import pytest
from unittest.mock import AsyncMock, Mock

from askdesk.common.errors import InvalidInput
from askdesk.common.schemas import RetrievedDocument


@pytest.fixture
def mock_embedding():
    embedding = Mock()
    embedding.embed = AsyncMock(return_value=[0.1] * 768)
    return embedding


@pytest.fixture
def mock_store():
    store = Mock()
    store.search = AsyncMock(return_value=[
        {"location_name": "Main St", "text": "Delivery 9am-9pm", "score": 0.91},
        {"location_name": "Bole", "text": "Pickup only", "score": 0.72},
    ])
    return store


@pytest.fixture
def searcher(mock_embedding, mock_store):
    from askdesk.retriever.searcher import Searcher
    return Searcher(mock_embedding, mock_store)


class TestSearcher:
    @pytest.mark.asyncio
    async def test_maps_payloads_to_documents(self, searcher):
        docs = await searcher.retrieve("What are your delivery hours?")

        assert docs == [
            RetrievedDocument(label="Main St", text="Delivery 9am-9pm"),
            RetrievedDocument(label="Bole", text="Pickup only"),
        ]

    @pytest.mark.asyncio
    async def test_passes_vector_and_default_limit(self, searcher, mock_store):
        await searcher.retrieve("hours?")
        mock_store.search.assert_awaited_once_with([0.1] * 768, 3)

    @pytest.mark.asyncio
    async def test_explicit_limit(self, searcher, mock_store):
        await searcher.retrieve("hours?", limit=7)
        assert mock_store.search.await_args.args[1] == 7

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self, searcher, mock_store, caplog):
        mock_store.search.side_effect = ConnectionError("vector store down")

        with caplog.at_level(logging.ERROR, logger="askdesk.retriever.searcher"):
            docs = await searcher.retrieve("hours?")

        assert docs == []
        assert "Vector search failed" in caplog.text

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self, searcher, mock_embedding, mock_store):
        mock_embedding.embed.side_effect = InvalidInput("empty")

        with pytest.raises(InvalidInput):
            await searcher.retrieve("")
        mock_store.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_nested_payload(self, searcher, mock_store):
        mock_store.search.return_value = [
            {"text": {"location_name": "Piassa", "text": "Open Sundays"}},
        ]
        docs = await searcher.retrieve("open?")
        assert docs == [RetrievedDocument(label="Piassa", text="Open Sundays")]

    def test_render(self):
        doc = RetrievedDocument(label="Main St", text="Delivery 9am-9pm")
        assert doc.render() == "Location: Main St\nDelivery 9am-9pm"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1])
    async def test_non_positive_limit_rejected(self, searcher, mock_store, limit):
        with pytest.raises(InvalidInput):
            await searcher.retrieve("hours?", limit=limit)
        mock_store.search.assert_not_called()
