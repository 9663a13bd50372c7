from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException

from ..core.config import get_settings
from ..services.openai_client import OpenAIChatClient


@lru_cache()
def shared_chat_client() -> OpenAIChatClient:
    return OpenAIChatClient()


def provide_chat_client() -> Optional[OpenAIChatClient]:
    """The shared client, or None when no API key is configured."""
    if not get_settings().openai_configured:
        return None
    return shared_chat_client()


def get_llm_client(client: Optional[OpenAIChatClient] = Depends(provide_chat_client)) -> OpenAIChatClient:
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="OpenAI API key not configured. Please set OPENAI_API_KEY in your .env file.",
        )
    return client
