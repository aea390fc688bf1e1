"""Team membership: a join between an account and a project with a role."""

from enum import Enum

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow


class TeamRole(str, Enum):
    """Role tag mapped to a static permission record."""
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class MemberStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


ROLE_PERMISSIONS = {
    TeamRole.OWNER: {"can_edit": True, "can_publish": True, "can_invite": True, "can_delete": True},
    TeamRole.ADMIN: {"can_edit": True, "can_publish": True, "can_invite": True, "can_delete": False},
    TeamRole.EDITOR: {"can_edit": True, "can_publish": False, "can_invite": False, "can_delete": False},
    TeamRole.VIEWER: {"can_edit": False, "can_publish": False, "can_invite": False, "can_delete": False},
}


def role_permissions(role) -> dict:
    """Permission record for a role; unknown roles get viewer permissions."""
    try:
        role = TeamRole(role)
    except ValueError:
        role = TeamRole.VIEWER
    return dict(ROLE_PERMISSIONS[role])


class TeamMember(Base):
    """Project team member or pending invitation."""

    __tablename__ = "team_members"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)

    # Null until the invitee has a profile
    user_id = Column(String(36), ForeignKey("profiles.id"), index=True)
    email = Column(String(255), index=True)
    invited_by = Column(String(36))

    role = Column(SQLEnum(TeamRole), default=TeamRole.VIEWER, nullable=False)
    permissions = Column(JSON, default=dict)
    status = Column(SQLEnum(MemberStatus), default=MemberStatus.PENDING, index=True)

    invited_at = Column(DateTime, default=utcnow)
    joined_at = Column(DateTime)

    project = relationship("Project", back_populates="members")
    profile = relationship("Profile")

    def __repr__(self):
        return f"<TeamMember(id={self.id}, project_id={self.project_id}, role={self.role})>"
