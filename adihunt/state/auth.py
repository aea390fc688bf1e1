"""Auth state: the signed-in identity and its profile."""

from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from ..config import get_settings
from ..database import SessionFactory, get_db_session, utcnow
from ..models import Profile, SubscriptionTier
from ..schemas import ProfileRecord, SessionUser


PROFILE_FIELDS = {
    "full_name", "avatar_url", "subscription_tier", "usage_count", "usage_limit",
    "api_credits", "preferences", "onboarding_completed",
}


@dataclass(frozen=True)
class AuthState:
    user: Optional[SessionUser] = None
    profile: Optional[ProfileRecord] = None
    loading: bool = False


def user_set(state: AuthState, user: Optional[SessionUser]) -> AuthState:
    return replace(state, user=user)


def profile_loaded(state: AuthState, profile: Optional[ProfileRecord]) -> AuthState:
    return replace(state, profile=profile)


def signed_out(state: AuthState) -> AuthState:
    return replace(state, user=None, profile=None)


class AuthStore:
    """
    Holds the identity handed over by the external auth provider.

    Password sign-in and sign-up happen elsewhere; this store only keeps
    the resulting user and loads or creates the matching profile.
    """

    def __init__(self, session_factory: Optional[SessionFactory] = None, default_usage_limit: Optional[int] = None):
        self.session_factory = session_factory
        self.default_usage_limit = default_usage_limit or get_settings().default_usage_limit
        self.state = AuthState()

    @property
    def user(self) -> Optional[SessionUser]:
        return self.state.user

    def _require_user(self) -> SessionUser:
        if self.state.user is None:
            raise PermissionError("No user is signed in")
        return self.state.user

    def set_user(self, user: Optional[SessionUser]):
        self.state = user_set(self.state, user)

    def load_profile(self, full_name: Optional[str] = None) -> ProfileRecord:
        """Load the user's profile, creating a free-tier one on first use."""
        user = self._require_user()

        with get_db_session(self.session_factory) as session:
            profile = session.get(Profile, user.id)
            if profile is None:
                profile = Profile(
                    id=user.id,
                    email=user.email,
                    full_name=full_name,
                    subscription_tier=SubscriptionTier.FREE,
                    usage_count=0,
                    usage_limit=self.default_usage_limit,
                )
                session.add(profile)
                session.flush()
                logger.info("Created profile for {}", user.email)
            record = ProfileRecord.model_validate(profile)

        self.state = profile_loaded(self.state, record)
        return record

    def update_profile(self, **updates) -> ProfileRecord:
        user = self._require_user()
        unknown = set(updates) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        if "subscription_tier" in updates:
            updates["subscription_tier"] = SubscriptionTier(updates["subscription_tier"])

        with get_db_session(self.session_factory) as session:
            profile = session.get(Profile, user.id)
            if profile is None:
                raise LookupError(f"Profile {user.id} not found")
            for key, value in updates.items():
                setattr(profile, key, value)
            profile.updated_at = utcnow()
            session.flush()
            record = ProfileRecord.model_validate(profile)

        self.state = profile_loaded(self.state, record)
        return record

    def sign_out(self):
        self.state = signed_out(self.state)
