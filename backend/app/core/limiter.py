"""Shared slowapi limiter; main.py registers it on app.state and installs the 429 handler."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from backend.app.core.settings import get_settings

_settings = get_settings()

limiter = Limiter(key_func=get_remote_address, enabled=_settings.RATE_LIMIT_ENABLED)

AUTH_RATE_LIMIT = _settings.AUTH_RATE_LIMIT
