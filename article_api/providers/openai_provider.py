"""
Remote provider backed by an OpenAI-compatible ``/chat/completions`` API.

The request is forwarded as-is (model + ordered messages); the text of the
first choice becomes the draft.  There is no retry: a failed call fails the
generate request.
"""
import logging
from typing import Any

import httpx

from article_api.exceptions import ProviderError, ProviderNotConfiguredError
from article_api.providers.base import ArticleDraftProvider, GeneratedArticle
from article_api.schemas import ChatMessage, GenerateArticleRequest

logger = logging.getLogger(__name__)


class OpenAIChatProvider(ArticleDraftProvider):
    """
    Calls an OpenAI-compatible chat completion endpoint with httpx.

    An ``http_client`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise a client is opened per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._base_url)

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _serialize_message(message: ChatMessage) -> dict[str, Any]:
        data: dict[str, Any] = {"role": message.role, "content": message.content}
        if message.name:
            data["name"] = message.name
        return data

    def _build_payload(self, params: GenerateArticleRequest) -> dict[str, Any]:
        return {
            "model": params.model,
            "messages": [self._serialize_message(m) for m in params.messages],
        }

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self._base_url}/chat/completions"
        headers = self._build_headers()
        if self._http_client is not None:
            return await self._http_client.post(url, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, json=payload, headers=headers)

    def _extract_text(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ProviderError(self.provider_name, "response did not contain a completion")
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(self.provider_name, "returned an empty completion")
        return content.strip()

    async def generate_article(self, params: GenerateArticleRequest) -> GeneratedArticle:
        if not self.is_configured:
            raise ProviderNotConfiguredError(
                self.provider_name, "OPENAI_API_KEY and OPENAI_BASE_URL must be set"
            )

        try:
            response = await self._post(self._build_payload(params))
        except httpx.HTTPError as exc:
            logger.warning("Draft request to %s failed: %s", self._base_url, exc)
            raise ProviderError(self.provider_name, f"request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Draft request to %s returned HTTP %d", self._base_url, response.status_code
            )
            raise ProviderError(
                self.provider_name,
                f"upstream returned HTTP {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(self.provider_name, "response was not valid JSON") from exc

        text = self._extract_text(data)
        # TODO: derive a real title once the title extraction rule is agreed;
        # until then the completion body doubles as the title.
        return GeneratedArticle(title=text, content=text, photo_url=None)
