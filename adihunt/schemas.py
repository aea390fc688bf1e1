"""Pydantic models for generated responses and in-memory records."""

from datetime import date, datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import (
    ArticleStatus, SubscriptionTier, TeamRole, MemberStatus, StepStatus, ActivityType,
)


# ---------------------------------------------------------------------------
# Generation requests and responses (camelCase on the wire)
# ---------------------------------------------------------------------------


class WireModel(BaseModel):
    """Base for shapes exchanged with the generator as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContentGenerationRequest(WireModel):
    topic: str
    tone: Literal["professional", "casual", "technical", "conversational"] = "professional"
    format: Literal["blog", "whitepaper", "guide", "press-release"] = "blog"
    language: str = "English"
    word_count: int = 1500
    target_keywords: list[str] = Field(default_factory=list)
    audience: str = "general readers"
    research_depth: Optional[Literal["basic", "comprehensive", "expert"]] = None
    seo_target: Optional[int] = None


class GeneratedContent(WireModel):
    """
    Article produced by the generator.

    ``degraded`` is set when the model's text was not parseable JSON and
    the fields were recovered by pattern matching or filled with defaults.
    """

    title: str = "Generated Content"
    meta_description: str = "AI-generated content description"
    content: str = ""
    keywords: list[str] = Field(default_factory=list)
    internal_links: list[str] = Field(default_factory=list)
    schema_markup: dict[str, Any] = Field(default_factory=dict)
    seo_score: float = 85
    degraded: bool = False


class OutlineHeading(WireModel):
    heading: str = ""
    subheadings: list[str] = Field(default_factory=list)


class SEOBrief(WireModel):
    """Content brief; ``error`` is set when the response could not be parsed."""

    suggested_title: str = ""
    primary_keywords: list[str] = Field(default_factory=list)
    secondary_keywords: list[str] = Field(default_factory=list)
    competitor_analysis: str = ""
    content_outline: list[OutlineHeading] = Field(default_factory=list)
    target_word_count: int = 0
    search_intent: Optional[Literal["informational", "navigational", "transactional", "commercial"]] = None
    difficulty: int = 0
    recommendations: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class ContentOptimization(WireModel):
    seo_score: float = 0
    keyword_density: dict[str, float] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)
    readability_score: float = 0
    structure_analysis: dict[str, int] = Field(default_factory=dict)
    missing_elements: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class AIRewrite(WireModel):
    original_text: str
    rewritten_text: str
    improvements: list[str] = Field(default_factory=list)
    seo_impact: float = 0


class OutlineSection(WireModel):
    heading: str = ""
    subheadings: list[str] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    word_count: Union[int, str, None] = None


class ContentOutline(WireModel):
    title: str
    introduction: str = ""
    sections: list[OutlineSection] = Field(default_factory=list)
    conclusion: str = ""
    faq: list[str] = Field(default_factory=list)
    total_word_count: Union[int, str] = 2000


class ContentSuggestion(WireModel):
    """Content idea from the assistant."""

    type: Literal["topic", "keyword", "structure", "optimization"] = "topic"
    title: str
    description: str = ""
    priority: int = 5
    estimated_impact: str = ""


# ---------------------------------------------------------------------------
# In-memory records built from ORM rows
# ---------------------------------------------------------------------------


class Record(BaseModel):
    """Immutable snapshot of a database row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class SessionUser(Record):
    """Signed-in identity supplied by the external auth provider."""

    id: str
    email: str


class ProfileRecord(Record):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    usage_count: int = 0
    usage_limit: int = 10
    api_credits: int = 0
    preferences: dict[str, Any] = Field(default_factory=dict)
    onboarding_completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectRecord(Record):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    industry: Optional[str] = None
    target_audience: Optional[str] = None
    brand_voice: Optional[str] = None
    primary_keywords: list[str] = Field(default_factory=list)
    competitor_urls: list[str] = Field(default_factory=list)
    article_count: int = 0
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ArticleRecord(Record):
    id: str
    project_id: str
    user_id: str
    title: str
    slug: Optional[str] = None
    meta_description: Optional[str] = None
    content: str = ""
    excerpt: Optional[str] = None
    target_keywords: list[str] = Field(default_factory=list)
    internal_links: list[str] = Field(default_factory=list)
    word_count: int = 0
    seo_score: float = 0
    readability_score: float = 0
    keyword_density: dict[str, float] = Field(default_factory=dict)
    schema_markup: Optional[dict[str, Any]] = None
    status: ArticleStatus = ArticleStatus.DRAFT
    published_at: Optional[datetime] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TeamMemberRecord(Record):
    id: str
    project_id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    invited_by: Optional[str] = None
    role: TeamRole = TeamRole.VIEWER
    permissions: dict[str, bool] = Field(default_factory=dict)
    status: MemberStatus = MemberStatus.PENDING
    invited_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None


class CommentRecord(Record):
    id: str
    article_id: str
    user_id: str
    parent_id: Optional[str] = None
    content: str
    position: Optional[dict[str, int]] = None
    resolved: bool = False
    created_at: Optional[datetime] = None
    replies: list["CommentRecord"] = Field(default_factory=list)


class WorkflowStepRecord(Record):
    id: str
    project_id: str
    name: str
    description: Optional[str] = None
    step_type: Optional[str] = None
    assignee_id: Optional[str] = None
    status: StepStatus = StepStatus.PENDING
    due_date: Optional[date] = None
    dependencies: list[str] = Field(default_factory=list)
    estimated_hours: float = 0
    position: int = 0


class ActivityRecord(Record):
    id: str
    project_id: str
    user_id: Optional[str] = None
    activity_type: ActivityType
    description: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
