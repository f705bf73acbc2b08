"""
Unit Tests for List Summaries.

The agent runs against PydanticAI TestModel and FunctionModel, so no
real LLM is called.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pydantic_ai.models.function import FunctionModel
from pydantic_ai.models.test import TestModel

from snack.backend.integrations.ai_summary import (
    FALLBACK_THEMES,
    ListSummarizer,
    ListSummaryOutput,
    build_prompt,
    fallback_summary,
    get_list_summarizer,
)


def _link(url, title=None, description=None):
    return SimpleNamespace(url=url, title=title, description=description)


LINKS = [
    _link("https://docs.python.org/3/library/asyncio.html", "Asyncio coroutines reference", "Event loop docs"),
    _link("https://realpython.com/async-io-python/", "Async coroutines walkthrough"),
    _link("https://docs.python.org/3/library/typing.html"),
]


class TestBuildPrompt:
    def test_numbers_links_with_known_details(self):
        prompt = build_prompt("Async Python", LINKS)

        assert 'List Title: "Async Python"' in prompt
        assert "Number of Links: 3" in prompt
        assert "1. https://docs.python.org/3/library/asyncio.html" in prompt
        assert "   Description: Event loop docs" in prompt
        assert "3. https://docs.python.org/3/library/typing.html" in prompt
        # No title or description lines for the bare link
        assert prompt.rstrip().endswith("3. https://docs.python.org/3/library/typing.html")


class TestFallbackSummary:
    def test_lists_distinct_hostnames(self):
        result = fallback_summary("Async Python", LINKS)

        assert result.summary == (
            'A curated collection titled "Async Python" containing 3 links. '
            "This collection includes resources from docs.python.org, realpython.com and other sources."
        )

    def test_frequent_long_title_words_become_themes(self):
        result = fallback_summary("Async Python", LINKS)

        assert result.themes[0] == "coroutines"
        assert "reference" in result.themes
        assert "docs" not in result.themes

    def test_default_themes_without_titles(self):
        result = fallback_summary("Bare", [_link("https://example.com/a")])

        assert result.themes == FALLBACK_THEMES
        assert "containing 1 link." in result.summary


class TestListSummarizer:
    @pytest.mark.asyncio
    async def test_empty_list(self):
        result = await ListSummarizer(TestModel()).summarize("Nothing yet", [])

        assert result.summary == 'A curated collection titled "Nothing yet". This list is currently empty.'
        assert result.themes == []

    @pytest.mark.asyncio
    async def test_without_model_uses_fallback(self):
        summarizer = ListSummarizer(None)

        assert summarizer.uses_model is False
        assert await summarizer.summarize("Async Python", LINKS) == fallback_summary("Async Python", LINKS)

    @pytest.mark.asyncio
    async def test_model_output_returned(self):
        model = TestModel(custom_output_args={
            "summary": "Python concurrency references for developers.",
            "themes": ["asyncio", "typing"],
        })
        summarizer = ListSummarizer(model)

        result = await summarizer.summarize("Async Python", LINKS)

        assert summarizer.uses_model is True
        assert result == ListSummaryOutput(
            summary="Python concurrency references for developers.",
            themes=["asyncio", "typing"],
        )

    @pytest.mark.asyncio
    async def test_model_failure_falls_back(self):
        def unavailable(messages, info):
            raise RuntimeError("model unavailable")

        result = await ListSummarizer(FunctionModel(unavailable)).summarize("Async Python", LINKS)

        assert result == fallback_summary("Async Python", LINKS)

    @pytest.mark.asyncio
    async def test_links_truncated_to_max(self):
        links = [_link(f"https://example.com/{i}", f"Article number {i}") for i in range(5)]

        result = await ListSummarizer(None, max_links=2).summarize("Many", links)

        assert "containing 2 links" in result.summary


class TestGetListSummarizer:
    def test_no_api_key_means_no_model(self, mock_app_config):
        settings = SimpleNamespace(openai_api_key="")
        with patch("snack.backend.integrations.ai_summary.get_app_config", return_value=mock_app_config), \
             patch("snack.backend.integrations.ai_summary.get_settings", return_value=settings):
            summarizer = get_list_summarizer()

        assert summarizer.uses_model is False

    def test_api_key_builds_model(self, mock_app_config):
        settings = SimpleNamespace(openai_api_key="sk-test")
        with patch("snack.backend.integrations.ai_summary.get_app_config", return_value=mock_app_config), \
             patch("snack.backend.integrations.ai_summary.get_settings", return_value=settings):
            summarizer = get_list_summarizer()

        assert summarizer.uses_model is True
