"""
Draft provider interface.

Implementations turn a ``GenerateArticleRequest`` into a title/content pair
that the service persists through the normal create path.  They must raise
``ProviderError`` rather than return an empty draft.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from article_api.schemas import GenerateArticleRequest


@dataclass
class GeneratedArticle:
    """A draft produced by a provider, not yet persisted."""
    title: str
    content: str
    photo_url: Optional[str] = None


class ArticleDraftProvider(ABC):

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    async def generate_article(self, params: GenerateArticleRequest) -> GeneratedArticle:
        ...
