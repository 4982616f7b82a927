# Draft providers package.
#
#   template_provider: deterministic local generator, no network
#   openai_provider:   OpenAI-compatible chat completion API via httpx
#
# ``build_provider`` picks one from ``settings.AI_PROVIDER``; callers only
# ever see the ``ArticleDraftProvider`` interface.
from article_api.config import Settings
from article_api.exceptions import ProviderNotConfiguredError
from article_api.providers.base import ArticleDraftProvider, GeneratedArticle
from article_api.providers.openai_provider import OpenAIChatProvider
from article_api.providers.template_provider import TemplateArticleProvider

__all__ = [
    "ArticleDraftProvider",
    "GeneratedArticle",
    "OpenAIChatProvider",
    "TemplateArticleProvider",
    "build_provider",
]


def build_provider(settings: Settings) -> ArticleDraftProvider:
    name = settings.AI_PROVIDER.strip().lower()
    if name == "template":
        return TemplateArticleProvider()
    if name == "openai":
        return OpenAIChatProvider(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )
    raise ProviderNotConfiguredError(name or "unknown", f"unknown AI_PROVIDER {settings.AI_PROVIDER!r}")
