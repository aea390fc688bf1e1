"""Project model: a named grouping of articles owned by one account."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from ..config import DEFAULT_PROJECT_COLOR
from ..database import Base, new_id, utcnow


class Project(Base):
    """Content project."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text)
    color = Column(String(20), default=DEFAULT_PROJECT_COLOR)

    # Brand context used in prompts
    industry = Column(String(255))
    target_audience = Column(String(255))
    brand_voice = Column(String(255))
    primary_keywords = Column(JSON, default=list)
    competitor_urls = Column(JSON, default=list)

    article_count = Column(Integer, default=0)
    is_archived = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("Profile", back_populates="projects")
    articles = relationship("Article", back_populates="project", cascade="all, delete-orphan")
    members = relationship("TeamMember", back_populates="project", cascade="all, delete-orphan")
    workflow_steps = relationship("WorkflowStep", back_populates="project", cascade="all, delete-orphan")
    activities = relationship("ProjectActivity", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"
