"""Application state: immutable snapshots, reducers and stores."""

from .auth import AuthState, AuthStore
from .content import ContentState, ContentStore

__all__ = ["AuthState", "AuthStore", "ContentState", "ContentStore"]
