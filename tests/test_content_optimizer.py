"""Tests for the content optimizer."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from adihunt.services.content_optimizer import (
    ContentOptimizer,
    DEFAULT_SCHEMA_MARKUP,
    suggest_internal_links,
)
from adihunt.services.gemini import GeminiClient, GenerationError


@pytest.fixture
def client():
    return MagicMock(spec=GeminiClient)


@pytest.fixture
def optimizer(client):
    return ContentOptimizer(client)


class TestKeywordRewrite:

    def test_rewrite(self, optimizer, client):
        client.make_request.return_value = json.dumps({
            "rewrittenText": "Apostille services explained",
            "improvements": ["Added keyword to opening"],
            "seoImpact": "12",
        })

        result = optimizer.optimize_for_keyword("Services explained", "apostille")

        assert result.original_text == "Services explained"
        assert result.rewritten_text == "Apostille services explained"
        assert result.improvements == ["Added keyword to opening"]
        assert result.seo_impact == 12

    def test_rewrite_fallback_keeps_original(self, optimizer, client):
        client.make_request.return_value = "Sorry, I can't help with that."

        result = optimizer.optimize_for_keyword("Original text", "apostille")

        assert result.rewritten_text == "Original text"
        assert result.improvements == ["Failed to optimize content"]
        assert result.seo_impact == 0

    def test_generator_failure_propagates(self, optimizer, client):
        client.make_request.side_effect = GenerationError("Gemini API error: 500")
        with pytest.raises(GenerationError):
            optimizer.optimize_for_keyword("text", "apostille")


class TestGeneratedMetadata:

    def test_meta_description_is_raw_text(self, optimizer, client):
        client.make_request.return_value = "  Fast apostille help in Virginia.  \n"
        assert optimizer.generate_meta_description("content", "apostille") == "Fast apostille help in Virginia."

    def test_meta_description_prompt_limit(self, optimizer, client):
        client.make_request.return_value = "desc"
        optimizer.generate_meta_description("y" * 3000, "apostille")
        prompt = client.make_request.call_args.args[0]
        assert "y" * 1000 + "..." in prompt
        assert "y" * 1001 not in prompt

    def test_schema_markup(self, optimizer, client):
        client.make_request.return_value = '{"@context": "https://schema.org", "@type": "HowTo"}'
        assert optimizer.generate_schema_markup("content", "guide")["@type"] == "HowTo"

    def test_schema_markup_fallback(self, optimizer, client):
        client.make_request.return_value = "no schema"
        markup = optimizer.generate_schema_markup("content")
        assert markup == DEFAULT_SCHEMA_MARKUP
        assert markup["author"] == {"@type": "Person", "name": "AI Assistant"}

    def test_outline(self, optimizer, client):
        client.make_request.return_value = json.dumps({
            "title": "Apostille Guide",
            "introduction": "Why it matters",
            "sections": [{"heading": "Steps", "subheadings": ["Gather documents"],
                          "keyPoints": ["Originals only"], "wordCount": "400"}],
            "faq": ["How long does it take?"],
            "totalWordCount": 2200,
        })

        outline = optimizer.generate_content_outline("Apostilles", ["apostille"])

        assert outline.title == "Apostille Guide"
        assert outline.sections[0].key_points == ["Originals only"]
        assert outline.total_word_count == 2200

    def test_outline_fallback(self, optimizer, client):
        client.make_request.return_value = "not an outline"

        outline = optimizer.generate_content_outline("Apostilles", ["apostille"])

        assert outline.title == "Apostilles"
        assert outline.sections == []
        assert outline.total_word_count == 2000


class TestInternalLinks:

    def test_matches_whole_words(self):
        articles = [
            SimpleNamespace(title="Mobile Notary Guide", target_keywords=["notary"]),
            SimpleNamespace(title="Apostille FAQ", target_keywords=["Apostille", "embassy"]),
        ]
        suggestions = suggest_internal_links("Our notary can handle any apostille request", articles)
        assert suggestions == [
            'Link "notary" to "Mobile Notary Guide"',
            'Link "Apostille" to "Apostille FAQ"',
        ]

    def test_partial_words_do_not_match(self):
        articles = [SimpleNamespace(title="Notary", target_keywords=["notary"])]
        assert suggest_internal_links("notarization only", articles) == []

    def test_at_most_ten(self):
        articles = [SimpleNamespace(title=f"Article {i}", target_keywords=["seo"]) for i in range(15)]
        assert len(suggest_internal_links("seo tips", articles)) == 10

    def test_articles_without_keywords(self):
        articles = [SimpleNamespace(title="Empty", target_keywords=None)]
        assert suggest_internal_links("anything", articles) == []


def test_analyze_content_uses_heuristic(optimizer):
    result = optimizer.analyze_content("<h1>SEO Guide</h1><p>SEO SEO SEO</p>", ["SEO"])
    assert result.word_count == 5
    assert result.seo_score == 20
