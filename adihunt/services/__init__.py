"""Services for AdiHunt."""

from .scoring import score_content, ContentScore
from .gemini import GeminiClient, GenerationError
from .content_optimizer import ContentOptimizer
from .collaboration import CollaborationService
from .assistant import SEOAssistant
from .analytics import generate_insights

__all__ = [
    "score_content",
    "ContentScore",
    "GeminiClient",
    "GenerationError",
    "ContentOptimizer",
    "CollaborationService",
    "SEOAssistant",
    "generate_insights",
]
