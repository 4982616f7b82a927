# Repositories package.
#
# article_repository: the article store: parameterised statements against
#                      the ``articles`` table plus the pure partial-update
#                      builder.
#
# Stores receive an ``async_sessionmaker`` rather than a session so that
# each statement checks out its own connection.
from article_api.repositories.article_repository import ArticleRepository, build_update_values

__all__ = ["ArticleRepository", "build_update_values"]
