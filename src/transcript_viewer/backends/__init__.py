"""Auto-detect available transcript backends."""

import logging

from ..provider import ChatProvider
from .claude_code import ClaudeCodeProvider

logger = logging.getLogger(__name__)


def get_available_providers() -> list[ChatProvider]:
    """Return the providers whose session data exists on this machine."""
    providers = []
    for ProviderClass in [ClaudeCodeProvider]:
        try:
            provider = ProviderClass()
            if provider.is_available():
                providers.append(provider)
        except OSError as e:
            logger.warning("Skipping provider %s: %s", ProviderClass.name, e)
    return providers
