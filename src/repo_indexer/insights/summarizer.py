"""Summarizer backed by the Ollama REST API."""

import httpx
import structlog

from repo_indexer.core.exceptions import InsightsError

logger = structlog.get_logger(__name__)


class OllamaSummarizer:
    """Sends prompts to Ollama's ``/api/generate`` and returns the text."""

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        """Run one non-streaming completion."""
        payload: dict = {"model": self.model, "prompt": prompt, "stream": False}
        if json_mode:
            payload["format"] = "json"
        try:
            resp = await self.client.post("/api/generate", json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise InsightsError(
                f"Summarizer request failed: {type(e).__name__}: {e}",
                details={"model": self.model},
            ) from e

        text = (resp.json().get("response") or "").strip()
        if not text:
            raise InsightsError("Summarizer returned an empty response", details={"model": self.model})
        logger.debug("Summarizer responded", model=self.model, chars=len(text))
        return text
