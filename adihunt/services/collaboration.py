"""
Collaboration Service
=====================

Team membership, article comments, workflow steps and the activity feed.
Each call is one unit of work against the database.
"""

from typing import Optional

from loguru import logger

from ..config import ACTIVITY_FEED_LIMIT
from ..database import SessionFactory, get_db_session, utcnow
from ..models import (
    Article, ArticleComment, Profile, Project, ProjectActivity, TeamMember, TeamRole,
    MemberStatus, WorkflowStep, StepStatus, ActivityType, log_activity, role_permissions,
)
from ..schemas import (
    SessionUser, TeamMemberRecord, CommentRecord, WorkflowStepRecord, ActivityRecord,
)
from .workflows import build_smart_workflow


STEP_FIELDS = {
    "name", "description", "step_type", "assignee_id", "status",
    "due_date", "dependencies", "estimated_hours", "position",
}


def coerce_role(role) -> TeamRole:
    """Unknown roles become viewers, matching their permissions."""
    try:
        return TeamRole(role)
    except ValueError:
        logger.warning("Unknown role '{}', using viewer", role)
        return TeamRole.VIEWER


class CollaborationService:
    """Team, comment and workflow operations for one signed-in user."""

    def __init__(self, session_factory: Optional[SessionFactory] = None, user: Optional[SessionUser] = None):
        self.session_factory = session_factory
        self.user = user

    def _require_user(self) -> SessionUser:
        if self.user is None:
            raise PermissionError("Not authenticated")
        return self.user

    @staticmethod
    def _get(session, model, row_id: str):
        row = session.get(model, row_id)
        if row is None:
            raise LookupError(f"{model.__name__} {row_id} not found")
        return row

    # ------------------------------------------------------------------
    # Team
    # ------------------------------------------------------------------

    def invite_member(self, project_id: str, email: str, role: str = "viewer") -> TeamMemberRecord:
        """
        Invite someone to a project.

        The member is active immediately when a profile with that email
        exists, otherwise pending until they sign up.
        """
        user = self._require_user()
        team_role = coerce_role(role)

        with get_db_session(self.session_factory) as session:
            self._get(session, Project, project_id)
            existing = session.query(Profile).filter(Profile.email == email).first()

            if existing is None:
                logger.info("Sending invitation to {} for project {}", email, project_id)

            member = TeamMember(
                project_id=project_id,
                user_id=existing.id if existing else None,
                email=email,
                invited_by=user.id,
                role=team_role,
                permissions=role_permissions(team_role),
                status=MemberStatus.ACTIVE if existing else MemberStatus.PENDING,
                joined_at=utcnow() if existing else None,
            )
            session.add(member)
            log_activity(
                session, project_id, ActivityType.MEMBER_INVITED,
                f"Invited {email} as {team_role.value}",
                user_id=user.id,
                details={"email": email, "role": team_role.value},
            )
            session.flush()
            logger.info("Team member {} added to project {} ({})", email, project_id, member.status.value)
            return TeamMemberRecord.model_validate(member)

    def list_members(self, project_id: str) -> list[TeamMemberRecord]:
        with get_db_session(self.session_factory) as session:
            members = (
                session.query(TeamMember)
                .filter(TeamMember.project_id == project_id)
                .order_by(TeamMember.invited_at)
                .all()
            )
            return [TeamMemberRecord.model_validate(m) for m in members]

    def update_member_role(self, member_id: str, role: str) -> TeamMemberRecord:
        """Change a member's role; permissions are re-derived from it."""
        team_role = coerce_role(role)

        with get_db_session(self.session_factory) as session:
            member = self._get(session, TeamMember, member_id)
            member.role = team_role
            member.permissions = role_permissions(team_role)
            log_activity(
                session, member.project_id, ActivityType.ROLE_CHANGED,
                f"Changed role of {member.email or member.user_id} to {team_role.value}",
                user_id=self.user.id if self.user else None,
            )
            session.flush()
            return TeamMemberRecord.model_validate(member)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(
        self,
        article_id: str,
        content: str,
        position: Optional[dict] = None,
        parent_id: Optional[str] = None
    ) -> CommentRecord:
        """
        Comment on an article, or reply to one of its top-level comments.

        Raises:
            LookupError: If the article or parent comment does not exist
            ValueError: If the parent is itself a reply or on another article
        """
        user = self._require_user()

        with get_db_session(self.session_factory) as session:
            article = self._get(session, Article, article_id)

            if parent_id is not None:
                parent = self._get(session, ArticleComment, parent_id)
                if parent.article_id != article_id:
                    raise ValueError("Parent comment belongs to a different article")
                if parent.parent_id is not None:
                    raise ValueError("Replies can only be added to top-level comments")

            comment = ArticleComment(
                article_id=article_id,
                user_id=user.id,
                parent_id=parent_id,
                content=content,
                position=position,
                resolved=False,
            )
            session.add(comment)
            log_activity(
                session, article.project_id, ActivityType.COMMENT_ADDED,
                f"Commented on \"{article.title}\"",
                user_id=user.id,
                details={"article_id": article_id},
            )
            session.flush()
            return CommentRecord.model_validate(comment)

    def list_comments(self, article_id: str) -> list[CommentRecord]:
        """Top-level comments, oldest first, each with its replies."""
        with get_db_session(self.session_factory) as session:
            comments = (
                session.query(ArticleComment)
                .filter(ArticleComment.article_id == article_id, ArticleComment.parent_id.is_(None))
                .order_by(ArticleComment.created_at)
                .all()
            )
            return [CommentRecord.model_validate(c) for c in comments]

    def resolve_comment(self, comment_id: str) -> CommentRecord:
        with get_db_session(self.session_factory) as session:
            comment = self._get(session, ArticleComment, comment_id)
            comment.resolved = True
            log_activity(
                session, comment.article.project_id, ActivityType.COMMENT_RESOLVED,
                "Resolved a comment",
                user_id=self.user.id if self.user else None,
                details={"comment_id": comment_id},
            )
            session.flush()
            return CommentRecord.model_validate(comment)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def create_workflow(self, project_id: str, steps: list[dict]) -> list[WorkflowStepRecord]:
        """Store workflow steps in the given order."""
        for step in steps:
            unknown = set(step) - STEP_FIELDS
            if unknown:
                raise ValueError(f"Unknown workflow step fields: {', '.join(sorted(unknown))}")

        with get_db_session(self.session_factory) as session:
            self._get(session, Project, project_id)
            rows = []
            for index, step in enumerate(steps):
                fields = {"position": index, **step}
                if "status" in fields:
                    fields["status"] = StepStatus(fields["status"])
                row = WorkflowStep(project_id=project_id, **fields)
                session.add(row)
                rows.append(row)

            log_activity(
                session, project_id, ActivityType.WORKFLOW_CREATED,
                f"Created workflow with {len(rows)} steps",
                user_id=self.user.id if self.user else None,
            )
            session.flush()
            logger.info("Created {} workflow steps for project {}", len(rows), project_id)
            return [WorkflowStepRecord.model_validate(r) for r in rows]

    def create_workflow_from_template(
        self,
        project_id: str,
        content_type: str,
        complexity: str = "medium"
    ) -> list[WorkflowStepRecord]:
        template = build_smart_workflow(content_type, complexity)
        logger.info(
            "Using template '{}' ({} hours estimated)",
            template.name,
            template.total_estimated_hours,
        )
        return self.create_workflow(project_id, template.step_rows())

    def list_workflow(self, project_id: str) -> list[WorkflowStepRecord]:
        with get_db_session(self.session_factory) as session:
            steps = (
                session.query(WorkflowStep)
                .filter(WorkflowStep.project_id == project_id)
                .order_by(WorkflowStep.position)
                .all()
            )
            return [WorkflowStepRecord.model_validate(s) for s in steps]

    def update_workflow_step(self, step_id: str, **updates) -> WorkflowStepRecord:
        unknown = set(updates) - STEP_FIELDS
        if unknown:
            raise ValueError(f"Unknown workflow step fields: {', '.join(sorted(unknown))}")
        if "status" in updates:
            updates["status"] = StepStatus(updates["status"])

        with get_db_session(self.session_factory) as session:
            step = self._get(session, WorkflowStep, step_id)
            for key, value in updates.items():
                setattr(step, key, value)
            log_activity(
                session, step.project_id, ActivityType.WORKFLOW_STEP_UPDATED,
                f"Updated workflow step \"{step.name}\"",
                user_id=self.user.id if self.user else None,
                details={k: str(v) for k, v in updates.items()},
            )
            session.flush()
            return WorkflowStepRecord.model_validate(step)

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def activity_feed(self, project_id: str, limit: int = ACTIVITY_FEED_LIMIT) -> list[ActivityRecord]:
        """Most recent activity first."""
        with get_db_session(self.session_factory) as session:
            entries = (
                session.query(ProjectActivity)
                .filter(ProjectActivity.project_id == project_id)
                .order_by(ProjectActivity.created_at.desc())
                .limit(limit)
                .all()
            )
            return [ActivityRecord.model_validate(e) for e in entries]
