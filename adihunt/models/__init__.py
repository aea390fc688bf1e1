"""Database models for AdiHunt."""

from .profile import Profile, SubscriptionTier
from .project import Project
from .article import Article, ArticleStatus
from .team import TeamMember, TeamRole, MemberStatus, role_permissions
from .comment import ArticleComment
from .workflow import WorkflowStep, StepStatus
from .activity import ProjectActivity, ActivityType, log_activity

__all__ = [
    "Profile",
    "SubscriptionTier",
    "Project",
    "Article",
    "ArticleStatus",
    "TeamMember",
    "TeamRole",
    "MemberStatus",
    "role_permissions",
    "ArticleComment",
    "WorkflowStep",
    "StepStatus",
    "ProjectActivity",
    "ActivityType",
    "log_activity",
]
