from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

IMAGE_DETAILS = ("low", "high", "auto")


class ConfigError(Exception):
    """Raised when an environment setting has an invalid value."""


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Runtime settings for the analysis service.

    A missing `OPENAI_API_KEY` is allowed here: the handler reports it per
    request as a server misconfiguration.
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        model: str = "gpt-4o",
        max_tokens: int = 800,
        temperature: float = 0.2,
        image_detail: str = "low",
        strict_schema: bool = False,
        cors_allow_origins: Optional[List[str]] = None,
    ):
        self.openai_api_key = openai_api_key or None
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.image_detail = image_detail
        self.strict_schema = strict_schema
        self.cors_allow_origins = cors_allow_origins or ["*"]

        self._validate()

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            max_tokens = int(os.getenv("OPENAI_MAX_TOKENS", 800))
        except ValueError:
            raise ConfigError("OPENAI_MAX_TOKENS must be a valid integer")

        try:
            temperature = float(os.getenv("OPENAI_TEMPERATURE", 0.2))
        except ValueError:
            raise ConfigError("OPENAI_TEMPERATURE must be a valid float")

        origins = [
            o.strip()
            for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if o.strip()
        ]

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            max_tokens=max_tokens,
            temperature=temperature,
            image_detail=os.getenv("OPENAI_IMAGE_DETAIL", "low"),
            strict_schema=_env_bool("NUTRITION_STRICT_SCHEMA", False),
            cors_allow_origins=origins,
        )

    def _validate(self) -> None:
        if self.max_tokens <= 0:
            raise ConfigError("OPENAI_MAX_TOKENS must be greater than 0")

        if self.temperature < 0 or self.temperature > 2:
            raise ConfigError("OPENAI_TEMPERATURE must be between 0 and 2")

        if self.image_detail not in IMAGE_DETAILS:
            raise ConfigError(
                f"OPENAI_IMAGE_DETAIL must be one of {', '.join(IMAGE_DETAILS)}"
            )

    def __repr__(self) -> str:
        key = "set" if self.openai_api_key else "missing"
        return f"Settings(model={self.model!r}, api_key={key})"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """FastAPI dependency returning process-wide settings, loaded once."""
    load_dotenv()
    return Settings.from_env()
