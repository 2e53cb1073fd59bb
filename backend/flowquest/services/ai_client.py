"""
Chat-completion client: Anthropic Messages API.

The rest of the app treats the provider as an opaque function from a list of
chat messages to a reply string. Provider failures are translated into the
UpstreamProviderError family so routes never see SDK exception types.
"""

import logging

import anthropic

from flowquest.config import Settings
from flowquest.errors import (
    ProviderAuthError,
    ProviderQuotaError,
    UpstreamProviderError,
)

logger = logging.getLogger(__name__)


def ai_provider_name(settings: Settings) -> str:
    if settings.ANTHROPIC_API_KEY:
        return f"Anthropic ({settings.ANTHROPIC_MODEL})"
    return "none"


def _split_system(messages: list[dict]) -> tuple[str, list[dict]]:
    """Anthropic takes system prompts separately from the conversation."""
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    conversation = [
        {"role": m["role"], "content": m["content"]}
        for m in messages
        if m["role"] != "system"
    ]
    return "\n\n".join(system_parts), conversation


def ensure_configured(settings: Settings) -> None:
    if not settings.ANTHROPIC_API_KEY:
        raise UpstreamProviderError(
            "Set ANTHROPIC_API_KEY in backend/.env and restart.",
            error="Chat completion provider is not configured",
        )


async def complete(
    settings: Settings,
    messages: list[dict],
    max_tokens: int,
    temperature: float,
) -> str:
    """
    Send a chat completion request and return the reply text.

    Raises:
        UpstreamProviderError: no credential configured, empty reply, or any
            other provider failure.
        ProviderQuotaError: the provider rejected the call for quota/rate reasons.
        ProviderAuthError: the provider rejected the credential.
    """
    ensure_configured(settings)

    system, conversation = _split_system(messages)
    request: dict = {
        "model": settings.ANTHROPIC_MODEL,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": conversation,
    }
    if system:
        request["system"] = system

    client = anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
    try:
        response = await client.messages.create(**request)
    except anthropic.RateLimitError as e:
        logger.warning("Anthropic quota/rate limit: %s", e)
        raise ProviderQuotaError("Check the provider account's usage limits.") from e
    except anthropic.AuthenticationError as e:
        logger.warning("Anthropic rejected the API key: %s", e)
        raise ProviderAuthError("Check ANTHROPIC_API_KEY.") from e
    except anthropic.APIError as e:
        logger.error("Anthropic error: %s", e)
        raise UpstreamProviderError("Please try again later.") from e
    finally:
        await client.close()

    text = "".join(block.text for block in response.content if block.type == "text")
    if not text:
        raise UpstreamProviderError(error="Chat completion provider returned an empty reply")
    return text
