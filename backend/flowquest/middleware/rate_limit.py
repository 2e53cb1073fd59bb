"""Per-client rate limiting (slowapi).

The limiter is process-wide, as slowapi decorates routes at import time.
``configure`` lets the app factory swap in the chat limit from the settings
it was built with; the limit string is re-read on every request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from flowquest.config import Settings, settings

limiter = Limiter(key_func=get_remote_address)

_chat_limit = settings.CHAT_RATE_LIMIT


def configure(app_settings: Settings) -> None:
    global _chat_limit
    _chat_limit = app_settings.CHAT_RATE_LIMIT


def chat_rate_limit() -> str:
    return _chat_limit
