"""
AdiHunt SEO Content Studio
==========================

AI-assisted article generation, content scoring, and team collaboration
for SEO projects.
"""

__version__ = "0.3.0"

from adihunt.services.scoring import score_content
from adihunt.services.gemini import GeminiClient, GenerationError
from adihunt.state.auth import AuthStore
from adihunt.state.content import ContentStore

__all__ = [
    "score_content",
    "GeminiClient",
    "GenerationError",
    "AuthStore",
    "ContentStore",
]
