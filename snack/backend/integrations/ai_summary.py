"""
List Summaries.

A short summary and a few themes for a list, written for other AI
assistants reading the list page. The model sees only what is already
stored for each link (URL, title, description), all links in one request.
Without a configured model, or when the model call fails, a heuristic
summary built from hostnames and title words is returned instead.
"""

from collections import Counter
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field
from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from snack.backend.core.config import get_app_config, get_settings
from snack.backend.core.logging import get_logger
from snack.backend.domain.urls import get_hostname

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that creates concise, informative summaries "
    "of curated link collections. Your summaries should help other AI "
    "assistants quickly understand the content and purpose of the collection."
)

FALLBACK_THEMES = ["curated links", "resources"]
MAX_THEMES = 5
MIN_THEME_WORD_LENGTH = 5


class ListSummaryOutput(BaseModel):
    summary: str = Field(description="2-3 sentences on what the collection is about and who it is for, max 150 words")
    themes: list[str] = Field(description="3-5 key themes or topics, single words or short phrases")


def build_prompt(title: str, links: Sequence[Any]) -> str:
    entries = []
    for index, link in enumerate(links, start=1):
        parts = [f"{index}. {link.url}"]
        if link.title:
            parts.append(f"   Title: {link.title}")
        if link.description:
            parts.append(f"   Description: {link.description}")
        entries.append("\n".join(parts))

    return (
        "Analyze this curated link collection and summarize it for another AI assistant.\n\n"
        f'List Title: "{title}"\n'
        f"Number of Links: {len(links)}\n\n"
        "Links:\n" + "\n\n".join(entries)
    )


def empty_list_summary(title: str) -> ListSummaryOutput:
    return ListSummaryOutput(summary=f'A curated collection titled "{title}". This list is currently empty.', themes=[])


def fallback_summary(title: str, links: Sequence[Any]) -> ListSummaryOutput:
    """Hostnames for the summary, the most frequent long title words for themes."""
    domains = list(dict.fromkeys(get_hostname(link.url) for link in links))[:MAX_THEMES]
    plural = "" if len(links) == 1 else "s"
    summary = (
        f'A curated collection titled "{title}" containing {len(links)} link{plural}. '
        f"This collection includes resources from {', '.join(domains)} and other sources."
    )

    words = Counter(
        word
        for link in links
        for word in (link.title or "").lower().split()
        if len(word) >= MIN_THEME_WORD_LENGTH
    )
    themes = [word for word, _ in words.most_common(MAX_THEMES)]
    return ListSummaryOutput(summary=summary, themes=themes or list(FALLBACK_THEMES))


class ListSummarizer:
    """pydantic-ai agent with structured output, or the heuristic when model is None."""

    def __init__(
        self,
        model: Model | None,
        temperature: float = 0.7,
        max_tokens: int = 300,
        max_links: int = 100,
    ) -> None:
        self._agent: Agent[None, ListSummaryOutput] | None = None
        if model is not None:
            self._agent = Agent(model, output_type=ListSummaryOutput, instructions=SYSTEM_PROMPT)
        self._model_settings = {"temperature": temperature, "max_tokens": max_tokens}
        self._max_links = max_links

    @property
    def uses_model(self) -> bool:
        return self._agent is not None

    async def summarize(self, title: str, links: Sequence[Any]) -> ListSummaryOutput:
        """Never raises: model failures fall back to the heuristic summary."""
        if not links:
            return empty_list_summary(title)

        links = list(links)[: self._max_links]
        if self._agent is None:
            return fallback_summary(title, links)

        try:
            result = await self._agent.run(build_prompt(title, links), model_settings=self._model_settings)
        except Exception as e:
            logger.warning("List summary generation failed", extra={"error": str(e)})
            return fallback_summary(title, links)

        usage = result.usage()
        logger.info(
            "List summary generated",
            extra={
                "links": len(links),
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )
        return result.output


def get_list_summarizer() -> ListSummarizer:
    """FastAPI dependency providing the summarizer. No OPENAI_API_KEY means heuristic only."""
    config = get_app_config().integrations.ai_summary
    api_key = get_settings().openai_api_key

    model = None
    if api_key:
        model = OpenAIChatModel(config.model, provider=OpenAIProvider(api_key=api_key))
    return ListSummarizer(
        model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        max_links=config.max_links,
    )
