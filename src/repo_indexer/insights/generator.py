"""Generating repository insights from a README or the file layout."""

from typing import Protocol

import structlog
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from repo_indexer.core.exceptions import InsightsError
from repo_indexer.core.models.repository import Insights

logger = structlog.get_logger(__name__)

README_PROMPT = """You are documenting the GitHub repository "{repo_name}".

Here is its README:
---
{readme}
---

Here are some of its files:
{files}

Reply with a JSON object with exactly these keys:
  "summary": two or three sentences on what the project is and does,
  "quickstart": short steps to install and run it, or null if the README has none,
  "contribution_guide": how to contribute, or null if the README has nothing on it.
"""

STRUCTURE_PROMPT = """You are documenting the GitHub repository "{repo_name}".
It has no usable README. Based only on its file layout below, write a short
paragraph describing what the project probably is, its main language and
framework, and how the code is organized.

Files:
{files}
"""


class Summarizer(Protocol):
    async def generate(self, prompt: str, json_mode: bool = False) -> str: ...


class _ReadmeReply(BaseModel):
    summary: str
    quickstart: str | None = None
    contribution_guide: str | None = Field(
        default=None,
        validation_alias=AliasChoices("contribution_guide", "contributionGuide"),
    )


class InsightsGenerator:
    """Builds prompts for the summarizer and validates its replies."""

    def __init__(
        self,
        summarizer: Summarizer,
        max_files: int = 300,
        max_readme_chars: int = 12_000,
    ) -> None:
        self._summarizer = summarizer
        self._max_files = max_files
        self._max_readme_chars = max_readme_chars

    def _format_files(self, file_list: list[str]) -> str:
        shown = file_list[: self._max_files]
        lines = "\n".join(f"- {path}" for path in shown)
        if len(file_list) > len(shown):
            lines += f"\n... and {len(file_list) - len(shown)} more"
        return lines

    async def from_readme(
        self,
        repo_name: str,
        readme_text: str,
        file_list: list[str],
    ) -> Insights:
        """Summary, quickstart and contribution guide from a README."""
        prompt = README_PROMPT.format(
            repo_name=repo_name,
            readme=readme_text[: self._max_readme_chars],
            files=self._format_files(file_list),
        )
        raw = await self._summarizer.generate(prompt, json_mode=True)
        try:
            reply = _ReadmeReply.model_validate_json(raw)
        except ValidationError as e:
            raise InsightsError(
                "Summarizer reply is not valid insights JSON",
                details={"repo_name": repo_name, "errors": e.error_count()},
            ) from e
        if not reply.summary.strip():
            raise InsightsError("Summarizer returned an empty summary", details={"repo_name": repo_name})

        logger.info("Insights generated from README", repo_name=repo_name)
        return Insights(
            summary=reply.summary.strip(),
            quickstart=reply.quickstart,
            contribution_guide=reply.contribution_guide,
        )

    async def from_structure(self, repo_name: str, file_list: list[str]) -> str:
        """A summary inferred from the file layout alone."""
        prompt = STRUCTURE_PROMPT.format(
            repo_name=repo_name,
            files=self._format_files(file_list),
        )
        summary = await self._summarizer.generate(prompt)
        logger.info("Insights generated from structure", repo_name=repo_name, files=len(file_list))
        return summary
