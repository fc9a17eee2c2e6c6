from __future__ import annotations

from typing import Dict

from openai import AsyncOpenAI

_clients: Dict[str, AsyncOpenAI] = {}


def get_vision_client(api_key: str) -> AsyncOpenAI:
    """
    Returns a shared `AsyncOpenAI` client for the given credential.

    The client holds no per-request state, so one instance per key is
    reused across concurrent requests. SDK-level retries are disabled.
    """
    if not api_key:
        raise ValueError("api_key is required to build the vision client")

    client = _clients.get(api_key)
    if client is None:
        client = AsyncOpenAI(api_key=api_key, max_retries=0)
        _clients[api_key] = client

    return client
