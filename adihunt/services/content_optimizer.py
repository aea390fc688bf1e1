"""Content optimization: heuristic analysis plus generator-backed rewrites."""

from typing import Any, Iterable, Optional

from loguru import logger
from pydantic import ValidationError

from ..config import PROMPT_CONTENT_LIMITS, INTERNAL_LINK_SUGGESTION_LIMIT
from ..schemas import AIRewrite, ContentOutline
from .gemini import GeminiClient, safe_load_json
from .scoring import ContentScore, score_content


DEFAULT_SCHEMA_MARKUP = {
    "@context": "https://schema.org",
    "@type": "Article",
    "headline": "Generated Content",
    "author": {"@type": "Person", "name": "AI Assistant"},
}


def suggest_internal_links(content: str, existing_articles: Iterable[Any]) -> list[str]:
    """
    Suggest links to other articles whose target keywords appear in the content.

    A keyword matches only as a whole whitespace-separated word.
    """
    words = set(content.lower().split())
    suggestions = []

    for article in existing_articles:
        for keyword in getattr(article, "target_keywords", None) or []:
            if keyword.lower() in words:
                suggestions.append(f'Link "{keyword}" to "{article.title}"')

    return suggestions[:INTERNAL_LINK_SUGGESTION_LIMIT]


class ContentOptimizer:
    """Analyzes and improves article content."""

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

    @staticmethod
    def analyze_content(content: str, target_keywords: list[str]) -> ContentScore:
        return score_content(content, target_keywords)

    def optimize_for_keyword(self, content: str, keyword: str) -> AIRewrite:
        """Rewrite content around one keyword; returns the original text on failure."""
        prompt = f"""
    Optimize this content for the keyword "{keyword}" while maintaining natural readability:

    Content: {content[:PROMPT_CONTENT_LIMITS['optimize']]}...

    Return JSON with:
    {{
      "rewrittenText": "optimized version",
      "improvements": ["list of improvements made"],
      "seoImpact": "estimated SEO score improvement (0-100)"
    }}

    Focus on:
    - Natural keyword integration
    - Improved semantic relevance
    - Better content structure
    - Enhanced user engagement
    """
        data = safe_load_json(self.client.make_request(prompt))
        if isinstance(data, dict):
            try:
                return AIRewrite.model_validate({**data, "originalText": content})
            except ValidationError as e:
                logger.warning("Keyword rewrite did not match the expected shape: {}", e)

        logger.warning("Failed to optimize content for keyword '{}'", keyword)
        return AIRewrite(
            original_text=content,
            rewritten_text=content,
            improvements=["Failed to optimize content"],
            seo_impact=0,
        )

    def generate_meta_description(self, content: str, target_keyword: str) -> str:
        prompt = f"""
    Create an SEO-optimized meta description (150-160 characters) for this content:

    Content: {content[:PROMPT_CONTENT_LIMITS['meta_description']]}...
    Target Keyword: {target_keyword}

    Requirements:
    - Include target keyword naturally
    - Compelling and click-worthy
    - Accurate content summary
    - Call-to-action if appropriate
    """
        return self.client.make_request(prompt).strip()

    def generate_schema_markup(self, content: str, content_type: str = "article") -> dict:
        prompt = f"""
    Generate appropriate Schema.org markup for this {content_type} content:

    {content[:PROMPT_CONTENT_LIMITS['schema_markup']]}...

    Return valid JSON-LD schema markup that includes:
    - Article schema
    - Author information
    - Publishing details
    - Relevant structured data
    """
        data = safe_load_json(self.client.make_request(prompt))
        if isinstance(data, dict):
            return data

        logger.warning("Falling back to default Article schema markup")
        return dict(DEFAULT_SCHEMA_MARKUP)

    def generate_content_outline(self, topic: str, target_keywords: list[str]) -> ContentOutline:
        prompt = f"""
    Create a comprehensive content outline for: "{topic}"
    Target Keywords: {', '.join(target_keywords)}

    Return JSON with:
    {{
      "title": "SEO-optimized title",
      "introduction": "intro outline",
      "sections": [
        {{
          "heading": "H2 heading",
          "subheadings": ["H3 subheadings"],
          "keyPoints": ["main points to cover"],
          "wordCount": "estimated words"
        }}
      ],
      "conclusion": "conclusion outline",
      "faq": ["relevant FAQ questions"],
      "totalWordCount": "estimated total"
    }}
    """
        data = safe_load_json(self.client.make_request(prompt))
        if isinstance(data, dict):
            try:
                return ContentOutline.model_validate(data)
            except ValidationError as e:
                logger.warning("Content outline did not match the expected shape: {}", e)

        logger.warning("Failed to parse content outline for '{}'", topic)
        return ContentOutline(title=topic, sections=[], total_word_count=2000)
