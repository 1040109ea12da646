"""Tests for the Ollama summarizer."""

import json

import httpx
import pytest

from repo_indexer.core.exceptions import InsightsError
from repo_indexer.insights.summarizer import OllamaSummarizer


def make_summarizer(handler) -> OllamaSummarizer:
    return OllamaSummarizer(
        base_url="http://ollama.test",
        model="llama3.2",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestOllamaSummarizer:
    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": " A summary. ", "done": True})

        summarizer = make_summarizer(handler)
        try:
            text = await summarizer.generate("Describe it", json_mode=True)
        finally:
            await summarizer.close()

        assert text == "A summary."
        assert seen["path"] == "/api/generate"
        assert seen["body"] == {
            "model": "llama3.2",
            "prompt": "Describe it",
            "stream": False,
            "format": "json",
        }

    @pytest.mark.asyncio
    async def test_plain_mode_omits_format(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "text"})

        summarizer = make_summarizer(handler)
        try:
            await summarizer.generate("Describe it")
        finally:
            await summarizer.close()

        assert "format" not in seen["body"]

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        summarizer = make_summarizer(lambda request: httpx.Response(500, text="model not loaded"))
        try:
            with pytest.raises(InsightsError, match="request failed"):
                await summarizer.generate("Describe it")
        finally:
            await summarizer.close()

    @pytest.mark.asyncio
    async def test_empty_response(self) -> None:
        summarizer = make_summarizer(lambda request: httpx.Response(200, json={"response": ""}))
        try:
            with pytest.raises(InsightsError, match="empty"):
                await summarizer.generate("Describe it")
        finally:
            await summarizer.close()
