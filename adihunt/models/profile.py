"""Profile model for account identity, tier and usage counters."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class SubscriptionTier(str, Enum):
    """Account subscription tier."""
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Profile(Base):
    """Account profile, created on first load for a signed-in identity."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255))
    avatar_url = Column(String(500))

    subscription_tier = Column(SQLEnum(SubscriptionTier), default=SubscriptionTier.FREE)
    usage_count = Column(Integer, default=0)
    usage_limit = Column(Integer, default=10)
    api_credits = Column(Integer, default=0)

    preferences = Column(JSON, default=dict)
    onboarding_completed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', tier={self.subscription_tier})>"
