"""Activity log for project feeds."""

from enum import Enum
from typing import Optional

from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow


class ActivityType(str, Enum):
    """Type of project activity."""
    PROJECT_CREATED = "project_created"
    ARTICLE_CREATED = "article_created"
    ARTICLE_UPDATED = "article_updated"
    ARTICLE_GENERATED = "article_generated"
    ARTICLE_OPTIMIZED = "article_optimized"
    ARTICLE_DELETED = "article_deleted"
    MEMBER_INVITED = "member_invited"
    ROLE_CHANGED = "role_changed"
    COMMENT_ADDED = "comment_added"
    COMMENT_RESOLVED = "comment_resolved"
    WORKFLOW_CREATED = "workflow_created"
    WORKFLOW_STEP_UPDATED = "workflow_step_updated"


class ProjectActivity(Base):
    """Activity entry shown in a project's feed."""

    __tablename__ = "project_activities"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(36))

    activity_type = Column(SQLEnum(ActivityType), nullable=False, index=True)
    description = Column(Text)
    details = Column(JSON)

    created_at = Column(DateTime, default=utcnow, index=True)

    project = relationship("Project", back_populates="activities")

    def __repr__(self):
        return f"<ProjectActivity(id={self.id}, type={self.activity_type}, project_id={self.project_id})>"


def log_activity(
    session,
    project_id: str,
    activity_type: ActivityType,
    description: str,
    user_id: Optional[str] = None,
    details: Optional[dict] = None
) -> ProjectActivity:
    """Helper function to log an activity."""
    entry = ProjectActivity(
        project_id=project_id,
        user_id=user_id,
        activity_type=activity_type,
        description=description,
        details=details,
    )
    session.add(entry)
    return entry
