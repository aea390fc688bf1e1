"""
Gemini Client
=============

Prompt builders, the ``generateContent`` HTTP call and tolerant parsers
that turn generated text into typed responses.
"""

import json
import re
from typing import Any, Optional

import requests
from loguru import logger
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import get_settings, GENERATION_CONFIG, SAFETY_SETTINGS, PROMPT_CONTENT_LIMITS
from ..schemas import ContentGenerationRequest, GeneratedContent, SEOBrief, ContentOptimization


JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
CODE_FENCE_RE = re.compile(r"```(?:json|html)?")


class GenerationError(Exception):
    """The generator could not be reached or answered with an error."""
    pass


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def safe_load_json(text: str) -> Optional[Any]:
    """
    Parse JSON from model output.

    Code fences are stripped and the whole text is tried first. Otherwise
    the outermost ``{...}`` or ``[...]`` span is parsed, whichever starts
    earlier. Returns None when nothing parses.
    """
    if not text or not isinstance(text, str):
        return None

    text = CODE_FENCE_RE.sub("", text).strip()
    try:
        return json.loads(text)
    except ValueError:
        pass

    spans = [m for m in (JSON_OBJECT_RE.search(text), JSON_ARRAY_RE.search(text)) if m]
    for match in sorted(spans, key=lambda m: m.start()):
        try:
            return json.loads(match.group(0))
        except ValueError:
            continue
    return None


def extract_value(text: str, key: str) -> Optional[str]:
    match = re.search(rf'"{re.escape(key)}":\s*"([^"]*)"', text, re.IGNORECASE)
    return match.group(1) if match else None


def extract_list(text: str, key: str) -> list[str]:
    """Recover a string array field from text that is not valid JSON."""
    match = re.search(rf'"{re.escape(key)}":\s*\[(.*?)\]', text, re.DOTALL)
    if not match:
        return []

    body = match.group(1)
    try:
        items = json.loads(f"[{body}]")
        if all(isinstance(item, str) for item in items):
            return items
    except ValueError:
        pass
    return [item.strip().replace('"', "") for item in body.split(",")]


def parse_content_response(text: str) -> GeneratedContent:
    """
    Parse a generated article.

    A JSON object with some mistyped fields keeps its valid fields and
    defaults the rest. Text holding no JSON object at all falls back to
    field-by-field extraction. Either way the result is flagged as
    degraded.
    """
    text = text or ""
    data = safe_load_json(text)

    if isinstance(data, dict):
        try:
            return GeneratedContent.model_validate(data)
        except ValidationError as e:
            invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
            logger.warning("Dropping invalid generated fields: {}", ", ".join(sorted(map(str, invalid))))
            kept = {key: value for key, value in data.items() if key not in invalid}
            return GeneratedContent.model_validate({**kept, "degraded": True})

    logger.warning("Using fallback parsing for generated content ({} characters)", len(text))
    return GeneratedContent(
        title=extract_value(text, "title") or "Generated Content",
        meta_description=extract_value(text, "metaDescription") or "AI-generated content description",
        content=CODE_FENCE_RE.sub("", text).strip(),
        keywords=extract_list(text, "keywords"),
        internal_links=extract_list(text, "internalLinks"),
        schema_markup={},
        seo_score=85,
        degraded=True,
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

RESPONSE_SHAPE = """
    GENERATE A JSON RESPONSE WITH:
    {{
      "title": "SEO-optimized title (60-70 characters)",
      "metaDescription": "Compelling meta description (150-160 characters)",
      "content": "Full HTML article with proper headings, paragraphs, lists, and semantic structure",
      "keywords": ["primary", "secondary", "LSI keywords"],
      "internalLinks": ["suggested internal link anchor texts"],
      "schemaMarkup": {{
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": "title",
        "author": {{ "@type": "Person", "name": "Expert Author" }},
        "datePublished": "current date",
        "description": "meta description"
      }},
      "seoScore": {seo_score}
    }}
"""

CRITICAL_REQUIREMENTS = """
    CRITICAL REQUIREMENTS:
    - Use EEAT principles (Experience, Expertise, Authoritativeness, Trustworthiness)
    - Include expert quotes and citations
    - Add FAQ section with schema markup
    - Optimize for voice search with natural language
    - Include semantic keywords and entities
    - Structure with proper H1-H6 hierarchy
    - Add internal linking opportunities
    - Include compelling CTAs
    - Ensure mobile-first readability
    - Target featured snippets with concise answers
"""

INTRO = (
    "You are AdiHunt, the world's most advanced AI SEO content generator. "
    "Create expert-level, EEAT-optimized content that ranks #1 on Google."
)


def build_content_prompt(request: ContentGenerationRequest) -> str:
    return f"""
    {INTRO}

    CONTENT REQUIREMENTS:
    - Topic: {request.topic}
    - Tone: {request.tone}
    - Format: {request.format}
    - Language: {request.language}
    - Word Count: {request.word_count}
    - Target Keywords: {', '.join(request.target_keywords)}
    - Target Audience: {request.audience}
{RESPONSE_SHAPE.format(seo_score=85)}{CRITICAL_REQUIREMENTS}"""


def build_advanced_content_prompt(request: ContentGenerationRequest) -> str:
    seo_target = request.seo_target or 90
    return f"""
    {INTRO}

    CONTENT REQUIREMENTS:
    - Topic: {request.topic}
    - Target SEO Score: {seo_target}+
    - Research Depth: {request.research_depth or 'comprehensive'}
    - Word Count: {request.word_count}+
    - Target Keywords: {', '.join(request.target_keywords)}
    - Target Audience: {request.audience}

    ADVANCED AI RESEARCH PROCESS:
    1. KEYWORD RESEARCH: Identify trending keywords, long-tail variations, and semantic keywords
    2. COMPETITOR ANALYSIS: Analyze top-ranking content gaps and opportunities
    3. EXPERT SOURCES: Include authoritative references and expert insights
    4. TREND ANALYSIS: Incorporate current industry trends and data
    5. CONTENT STRUCTURE: Create optimal heading hierarchy and content flow
    6. SEO OPTIMIZATION: Implement advanced on-page SEO techniques
{RESPONSE_SHAPE.format(seo_score=92)}{CRITICAL_REQUIREMENTS}    - Achieve {seo_target}+ SEO score

    CONTENT DEPTH REQUIREMENTS:
    - Comprehensive coverage of the topic
    - Multiple expert perspectives
    - Data-driven insights and statistics
    - Actionable advice and implementation steps
    - Real-world examples and case studies
    - Future trends and predictions
    - Common challenges and solutions
    """


def build_seo_brief_prompt(topic: str, target_keywords: list[str]) -> str:
    return f"""
    Create a comprehensive SEO content brief for the topic: "{topic}"
    Target keywords: {', '.join(target_keywords)}

    Return a JSON object with:
    - suggestedTitle: string
    - primaryKeywords: string[]
    - secondaryKeywords: string[]
    - competitorAnalysis: string
    - contentOutline: {{ heading: string, subheadings: string[] }}[]
    - targetWordCount: number
    - searchIntent: 'informational' | 'navigational' | 'transactional' | 'commercial'
    - difficulty: number (1-100)
    - recommendations: string[]
    """


def build_optimize_prompt(content: str, target_keywords: list[str], limit: int) -> str:
    return f"""
    Analyze this content for SEO optimization:

    Content: {content[:limit]}...
    Target Keywords: {', '.join(target_keywords)}

    Return a JSON object with:
    - seoScore: number (0-100)
    - keywordDensity: {{ [keyword: string]: number }}
    - suggestions: string[]
    - readabilityScore: number
    - structureAnalysis: {{ headings: number, paragraphs: number, lists: number }}
    - missingElements: string[]
    """


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GeminiClient:
    """
    Client for the Gemini ``generateContent`` endpoint.

    One POST per call. Attempts and timeout come from settings; with the
    default of one attempt a failure is raised immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None
    ):
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.api_url = (api_url or settings.gemini_api_url).rstrip("/")
        self.timeout = timeout or settings.gemini_timeout_seconds
        self.max_attempts = max(1, max_attempts or settings.gemini_max_attempts)

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/{self.model}:generateContent"

    def _require_key(self) -> str:
        if not self.api_key:
            raise GenerationError("Missing GEMINI_API_KEY. Add it to your .env file.")
        return self.api_key

    def _post(self, prompt: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
            "safetySettings": SAFETY_SETTINGS,
        }

        try:
            response = requests.post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Gemini API request failed: {}", e)
            raise GenerationError(f"Gemini API request failed: {e}") from e

        if not response.ok:
            logger.error("Gemini API error: {} {}", response.status_code, response.reason)
            raise GenerationError(f"Gemini API error: {response.status_code} {response.reason}")

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError("Gemini API returned a non-JSON body") from e

        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            logger.warning("Gemini response had no candidate text")
            return ""

    def make_request(self, prompt: str) -> str:
        """Send one prompt and return the first candidate's text."""
        self._require_key()
        logger.debug("Sending prompt to {} ({} characters)", self.model, len(prompt))

        send = retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(GenerationError),
            reraise=True,
        )(self._post)
        return send(prompt)

    def generate_content(self, request: ContentGenerationRequest) -> GeneratedContent:
        logger.info("Generating content: topic='{}', format={}", request.topic, request.format)
        return parse_content_response(self.make_request(build_content_prompt(request)))

    def generate_advanced_content(self, request: ContentGenerationRequest) -> GeneratedContent:
        logger.info(
            "Generating advanced content: topic='{}', depth={}",
            request.topic,
            request.research_depth or "comprehensive",
        )
        return parse_content_response(self.make_request(build_advanced_content_prompt(request)))

    def generate_seo_brief(self, topic: str, target_keywords: list[str]) -> SEOBrief:
        """Content brief for a topic; ``error`` is set if the reply is unusable."""
        text = self.make_request(build_seo_brief_prompt(topic, target_keywords))
        data = safe_load_json(text)
        if isinstance(data, dict):
            try:
                return SEOBrief.model_validate(data)
            except ValidationError as e:
                logger.warning("SEO brief did not match the expected shape: {}", e)

        logger.warning("Failed to parse SEO brief response for '{}'", topic)
        return SEOBrief(error="Failed to parse SEO brief response")

    def optimize_content(self, content: str, target_keywords: list[str]) -> ContentOptimization:
        limit = PROMPT_CONTENT_LIMITS["optimize"]
        text = self.make_request(build_optimize_prompt(content, target_keywords, limit))
        data = safe_load_json(text)
        if isinstance(data, dict):
            try:
                return ContentOptimization.model_validate(data)
            except ValidationError as e:
                logger.warning("Optimization analysis did not match the expected shape: {}", e)

        logger.warning("Failed to parse optimization analysis")
        return ContentOptimization(seo_score=0, error="Failed to analyze content")
