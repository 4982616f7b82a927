"""
Local template provider: builds a structured placeholder article from the
topic, keywords and tone hints without any network access.  Output is fully
deterministic for a given request.
"""
from article_api.exceptions import ValidationError
from article_api.providers.base import ArticleDraftProvider, GeneratedArticle
from article_api.schemas import GenerateArticleRequest, UserMessage

DEFAULT_TONE = "informative"
TOPIC_REQUIRED_MESSAGE = "A topic or a non-empty user message is required"

_TONE_OPENINGS = {
    "informative": "This article walks through the essentials of {topic} and why they matter.",
    "casual": "Let's talk about {topic}, no jargon, just the good stuff.",
    "formal": "The following article presents a structured overview of {topic}.",
    "persuasive": "Here is why {topic} deserves your attention right now.",
}


def _resolve_topic(params: GenerateArticleRequest) -> str:
    if params.topic and params.topic.strip():
        return params.topic.strip()
    # Fall back to the most recent user prompt.
    for message in reversed(params.messages):
        if isinstance(message, UserMessage) and message.content.strip():
            return message.content.strip()
    return ""


class TemplateArticleProvider(ArticleDraftProvider):

    @property
    def provider_name(self) -> str:
        return "template"

    async def generate_article(self, params: GenerateArticleRequest) -> GeneratedArticle:
        topic = _resolve_topic(params)
        if not topic:
            raise ValidationError(
                TOPIC_REQUIRED_MESSAGE,
                [{"location": "body", "field": "topic", "message": TOPIC_REQUIRED_MESSAGE, "type": "missing"}],
            )

        tone = (params.tone or DEFAULT_TONE).strip().lower() or DEFAULT_TONE
        keywords = [k.strip() for k in params.keywords if k.strip()]
        opening = _TONE_OPENINGS.get(tone, _TONE_OPENINGS[DEFAULT_TONE]).format(topic=topic)

        title = f"{topic[:1].upper()}{topic[1:]} ({tone} overview)"

        sections = [f"# {title}", "", opening, ""]
        if keywords:
            sections.append("## Key points")
            sections.extend(f"- **{keyword}**: how it relates to {topic}." for keyword in keywords)
            sections.append("")
        sections.append("## Summary")
        sections.append(
            f"{topic[:1].upper()}{topic[1:]} is worth understanding in depth. "
            "Replace this draft with your own findings before publishing."
        )

        return GeneratedArticle(title=title, content="\n".join(sections), photo_url=None)
