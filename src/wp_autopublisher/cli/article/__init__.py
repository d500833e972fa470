"""Article commands: generate and publish."""

from .commands import generate, publish
from .params import GenerateParams, PublishParams
from .service import ArticleGeneratorService, ArticlePublisherService

__all__ = [
    "generate",
    "publish",
    "GenerateParams",
    "PublishParams",
    "ArticleGeneratorService",
    "ArticlePublisherService",
]
