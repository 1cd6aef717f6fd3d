"""
Generative assist backends.

The orchestrator works with any ``AssistBackend``, or with none at all.
"""

from typing import Optional

import httpx

from ..config import ConverterConfig
from .base import AssistBackend, AssistRequest, AssistTask
from .openai_backend import OpenAIAssistBackend

__all__ = ['AssistBackend', 'AssistRequest', 'AssistTask', 'OpenAIAssistBackend', 'create_assist_backend']


def create_assist_backend(config: ConverterConfig, client: Optional[httpx.AsyncClient] = None) -> Optional[AssistBackend]:
    """Build the configured assist backend, or None when assist is disabled."""
    if config.assist is None:
        return None
    return OpenAIAssistBackend(config.assist, client=client)
