# Services package.
#
#   article_service: CRUD + pagination + draft generation + cache for Article
#
# ``ArticleService`` receives its store and draft provider through the
# constructor; the FastAPI wiring lives in ``article_api.dependencies``.
from article_api.services.article_service import ArticleService

__all__ = ["ArticleService"]
