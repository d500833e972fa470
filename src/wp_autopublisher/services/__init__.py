"""Application services: generation orchestration and use cases."""

from .images import ImageUploadOutcome, SearchAndGenerateImage, UploadImageToWordPress
from .models import CustomPrompts, FeedItem, GenerationResult, GenerationSettings
from .orchestrator import GenerationOrchestrator
from .prompts import build_unified_prompt
from .publishing import PublishArticle, RetryPublication

__all__ = [
    "ImageUploadOutcome",
    "SearchAndGenerateImage",
    "UploadImageToWordPress",
    "CustomPrompts",
    "FeedItem",
    "GenerationResult",
    "GenerationSettings",
    "GenerationOrchestrator",
    "build_unified_prompt",
    "PublishArticle",
    "RetryPublication",
]
