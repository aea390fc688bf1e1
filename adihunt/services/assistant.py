"""
SEO Assistant
=============

Conversational helper: keyword-based intent detection, a bounded
per-user history and canned suggestions around each generated reply.
The history also feeds a simple profile of what the user asks about.
"""

import copy
import json
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from ..config import CONVERSATION_HISTORY_LIMIT
from ..database import utcnow
from ..schemas import ContentSuggestion
from .gemini import GeminiClient, safe_load_json


PROMPT_HISTORY_MESSAGES = 5

# Checked in order; the first matching intent wins
INTENT_KEYWORDS = [
    ("content_generation", ("generate", "create", "write")),
    ("optimization", ("optimize", "improve", "seo")),
    ("research", ("keyword", "research", "trend")),
    ("analytics", ("analyze", "report", "performance")),
]

CONTEXTUAL_SUGGESTIONS = {
    "content_generation": [
        "Try the advanced content generator for long-form articles",
        "Use trending keywords from your industry",
        "Consider creating a content series for better engagement",
    ],
    "optimization": [
        "Run a full SEO audit on your existing content",
        "Check your competitors' top-performing pages",
        "Optimize for voice search queries",
    ],
    "research": [
        "Explore the trending keywords section",
        "Analyze your competitors' content gaps",
        "Look for seasonal keyword opportunities",
    ],
    "analytics": [
        "Set up automated performance tracking",
        "Create custom analytics dashboards",
        "Monitor your keyword rankings weekly",
    ],
}
DEFAULT_SUGGESTIONS = [
    "Explore the content generator for new ideas",
    "Check out trending topics in your industry",
    "Consider optimizing your existing content",
]

ACTION_BUTTONS = {
    "content_generation": [
        {"type": "command", "label": "Open Generator", "data": {"command": "adihunt article generate"}},
        {"type": "command", "label": "Quick Generate", "data": {"command": "adihunt article generate --advanced"}},
    ],
    "optimization": [
        {"type": "command", "label": "SEO Optimizer", "data": {"command": "adihunt article optimize"}},
        {"type": "command", "label": "Analyze Content", "data": {"command": "adihunt analyze"}},
    ],
    "research": [
        {"type": "command", "label": "Keyword Research", "data": {"command": "adihunt article score"}},
    ],
}

FOLLOW_UP_QUESTIONS = {
    "content_generation": [
        "What type of content would you like to create?",
        "Do you have specific keywords in mind?",
        "What's your target audience for this content?",
    ],
    "optimization": [
        "Which piece of content needs optimization?",
        "Are you targeting specific keywords?",
        "What's your current SEO score?",
    ],
    "research": [
        "What industry or niche are you researching?",
        "Are you looking for trending or evergreen topics?",
        "Do you want competitor analysis included?",
    ],
}
DEFAULT_FOLLOW_UP = [
    "How can I help you improve your content strategy?",
    "What's your main SEO challenge right now?",
    "Would you like me to analyze your current performance?",
]

REAL_TIME_GUIDANCE = {
    "writing": [
        "Consider adding more semantic keywords to improve topical relevance",
        "Your current paragraph could benefit from a specific example",
        "Try breaking this long sentence into two for better readability",
    ],
    "optimizing": [
        "Your keyword density is optimal, but consider adding related terms",
        "Add more internal links to boost page authority",
        "Consider adding FAQ section for featured snippet opportunities",
    ],
    "researching": [
        "Look for trending subtopics in your industry",
        "Check competitor content gaps for opportunities",
        "Analyze search intent for your target keywords",
    ],
}

DEFAULT_CONTENT_SUGGESTIONS = [
    ContentSuggestion(
        type="topic",
        title="Create Industry Trend Analysis",
        description="Write about emerging trends in your industry to capture early search traffic",
        priority=8,
        estimated_impact="High - trending topics get more shares and backlinks",
    ),
    ContentSuggestion(
        type="keyword",
        title="Target Long-tail Keywords",
        description="Focus on specific, less competitive keywords with higher conversion potential",
        priority=7,
        estimated_impact="Medium - easier to rank, better conversion rates",
    ),
    ContentSuggestion(
        type="optimization",
        title="Improve Page Speed",
        description="Optimize images and code to improve Core Web Vitals scores",
        priority=9,
        estimated_impact="High - direct ranking factor and user experience improvement",
    ),
]

TOPIC_TERMS = [
    ("seo", "SEO"),
    ("content", "Content Creation"),
    ("keyword", "Keyword Research"),
    ("optimize", "Optimization"),
]
CONTENT_TYPE_TERMS = [
    ("blog", "Blog Posts"),
    ("guide", "Guides"),
    ("article", "Articles"),
    ("whitepaper", "Whitepapers"),
]
ADVANCED_TERMS = ("schema markup", "canonical", "crawl budget", "semantic keywords")
BASIC_TERMS = ("seo", "keywords", "content", "optimize")

PERSONALIZED_RECOMMENDATIONS = [
    "Focus on long-tail keywords for better conversion rates",
    "Create content clusters around your main topics",
    "Implement structured data for better search visibility",
]

DEFAULT_WORKFLOW = {
    "steps": [
        {"name": "Research & Planning", "duration": "2-3 days",
         "tasks": ["Keyword research", "Competitor analysis", "Content outline"]},
        {"name": "Content Creation", "duration": "3-5 days",
         "tasks": ["Writing", "Editing", "Fact-checking"]},
        {"name": "Optimization", "duration": "1-2 days",
         "tasks": ["SEO optimization", "Meta tags", "Internal linking"]},
        {"name": "Review & Publishing", "duration": "1 day",
         "tasks": ["Final review", "Publishing", "Promotion"]},
    ],
    "totalDuration": "7-11 days",
    "recommendations": [
        "Use AI assistance for faster content creation",
        "Implement peer review process",
        "Schedule content in advance",
    ],
}

_suggestion_list = TypeAdapter(list[ContentSuggestion])


@dataclass
class ConversationContext:
    """Who is asking and what they are working on."""
    user_id: str
    project_id: Optional[str] = None
    article_id: Optional[str] = None
    current_task: Optional[str] = None
    preferences: dict[str, str] = field(default_factory=dict)  # tone, industry, expertise_level


@dataclass
class AssistantResponse:
    message: str
    intent: str
    suggestions: list[str] = field(default_factory=list)
    actions: list[dict[str, Any]] = field(default_factory=list)
    follow_up: list[str] = field(default_factory=list)


@dataclass
class UserBehavior:
    """Patterns found in a user's side of the conversation."""
    most_asked_topics: list[str] = field(default_factory=list)
    preferred_content_types: list[str] = field(default_factory=list)
    skill_level: str = "Beginner"
    recommendations: list[str] = field(default_factory=list)


def detect_intent(message: str) -> str:
    lower_message = message.lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(k in lower_message for k in keywords):
            return intent
    return "general"


def real_time_guidance(current_action: str) -> list[str]:
    """Tips for the action in progress: writing, optimizing or researching."""
    return list(REAL_TIME_GUIDANCE.get(current_action, []))


def _user_messages(history: list[dict]) -> list[str]:
    return [m["content"].lower() for m in history if m.get("role") == "user"]


def _matching_labels(history: list[dict], terms) -> list[str]:
    labels = []
    for content in _user_messages(history):
        for term, label in terms:
            if term in content and label not in labels:
                labels.append(label)
    return labels


def assess_skill_level(history: list[dict]) -> str:
    """
    Beginner, Intermediate or Advanced from the terms a user writes.

    Advanced when advanced terms exceed 0.3 times the basic ones,
    Intermediate after more than five basic terms.
    """
    advanced = basic = 0
    for content in _user_messages(history):
        advanced += sum(1 for term in ADVANCED_TERMS if term in content)
        basic += sum(1 for term in BASIC_TERMS if term in content)

    if advanced > basic * 0.3:
        return "Advanced"
    if basic > 5:
        return "Intermediate"
    return "Beginner"


class SEOAssistant:
    """Assistant with an in-memory conversation history per user."""

    def __init__(self, client: Optional[GeminiClient] = None, history_limit: int = CONVERSATION_HISTORY_LIMIT):
        self.client = client or GeminiClient()
        self.history_limit = history_limit
        self._history: dict[str, list[dict]] = defaultdict(list)

    def history(self, user_id: str) -> list[dict]:
        return list(self._history.get(user_id, []))

    def _store_message(self, user_id: str, role: str, content: str):
        history = self._history[user_id]
        history.append({"role": role, "content": content, "timestamp": utcnow().isoformat()})
        if len(history) > self.history_limit:
            del history[:len(history) - self.history_limit]

    def _build_prompt(self, message: str, intent: str, context: ConversationContext) -> str:
        recent = self.history(context.user_id)[-PROMPT_HISTORY_MESSAGES:]
        return f"""
    You are Adi, an expert AI SEO assistant. Respond to this user message:

    Message: "{message}"
    Intent: {intent}
    User Context: {json.dumps(asdict(context))}
    Recent History: {json.dumps(recent)}

    Provide a helpful, actionable response with:
    - Clear, expert advice
    - Specific next steps
    - Relevant suggestions
    - Follow-up questions if appropriate

    Keep responses conversational but professional.
    """

    def process_message(self, message: str, context: ConversationContext) -> AssistantResponse:
        """
        Answer one message.

        The exchange is recorded only after the generator replies, so a
        failed request leaves the history unchanged.
        """
        intent = detect_intent(message)
        logger.debug("Assistant intent for user {}: {}", context.user_id, intent)

        reply = self.client.make_request(self._build_prompt(message, intent, context))

        self._store_message(context.user_id, "user", message)
        self._store_message(context.user_id, "assistant", reply)

        return AssistantResponse(
            message=reply,
            intent=intent,
            suggestions=list(CONTEXTUAL_SUGGESTIONS.get(intent, DEFAULT_SUGGESTIONS)),
            actions=[dict(a) for a in ACTION_BUTTONS.get(intent, [])],
            follow_up=list(FOLLOW_UP_QUESTIONS.get(intent, DEFAULT_FOLLOW_UP)),
        )

    def content_suggestions(self, context: ConversationContext) -> list[ContentSuggestion]:
        prefs = context.preferences
        prompt = f"""
    Based on the user's context:
    - Industry: {prefs.get('industry', 'general')}
    - Expertise: {prefs.get('expertise_level', 'beginner')}
    - Current project: {'Active' if context.project_id else 'None'}

    Generate 5 high-impact content suggestions that would help them achieve better SEO results.

    Return JSON array with:
    {{
      "type": "topic|keyword|structure|optimization",
      "title": "suggestion title",
      "description": "detailed description",
      "priority": 1-10,
      "estimatedImpact": "impact description"
    }}
    """
        data = safe_load_json(self.client.make_request(prompt))
        if isinstance(data, list):
            try:
                return _suggestion_list.validate_python(data)
            except ValidationError as e:
                logger.warning("Content suggestions did not match the expected shape: {}", e)

        logger.warning("Using default content suggestions")
        return list(DEFAULT_CONTENT_SUGGESTIONS)

    def analyze_user_behavior(self, user_id: str) -> UserBehavior:
        """Topics, content types and skill level from the user's recorded messages."""
        history = self.history(user_id)
        return UserBehavior(
            most_asked_topics=_matching_labels(history, TOPIC_TERMS),
            preferred_content_types=_matching_labels(history, CONTENT_TYPE_TERMS),
            skill_level=assess_skill_level(history),
            recommendations=list(PERSONALIZED_RECOMMENDATIONS),
        )

    def workflow_suggestion(self, project_data: dict[str, Any]) -> dict[str, Any]:
        """Suggested content workflow for a project, or the default plan."""
        prompt = f"""
    Based on this project data:
    {json.dumps(project_data, indent=2, default=str)}

    Suggest an optimal content workflow with:
    - Content planning steps
    - Research phases
    - Writing milestones
    - Review processes
    - Publishing timeline

    Return JSON with workflow steps and estimated timeframes.
    """
        data = safe_load_json(self.client.make_request(prompt))
        if isinstance(data, dict):
            return data

        logger.warning("Using default workflow suggestion")
        return copy.deepcopy(DEFAULT_WORKFLOW)
