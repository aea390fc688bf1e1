"""Article model with heuristic scores."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow


class ArticleStatus(str, Enum):
    """Status tag set directly by user actions."""
    DRAFT = "draft"
    OPTIMIZING = "optimizing"
    READY = "ready"
    PUBLISHED = "published"


class Article(Base):
    """Article body, target keywords and scores."""

    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    title = Column(String(500), nullable=False)
    slug = Column(String(500))
    meta_description = Column(Text)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text)

    target_keywords = Column(JSON, default=list)
    internal_links = Column(JSON, default=list)

    # Scores from the content heuristic
    word_count = Column(Integer, default=0)
    seo_score = Column(Float, default=0.0)
    readability_score = Column(Float, default=0.0)
    keyword_density = Column(JSON, default=dict)

    schema_markup = Column(JSON)

    status = Column(SQLEnum(ArticleStatus), default=ArticleStatus.DRAFT, index=True)
    published_at = Column(DateTime)
    version = Column(Integer, default=1)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="articles")
    comments = relationship("ArticleComment", back_populates="article", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Article(id={self.id}, title='{self.title}', status={self.status})>"
