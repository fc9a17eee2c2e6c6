from __future__ import annotations

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from api.config import get_settings
from models.vision import get_vision_client
from pipeline.prompts import NUTRITION_PROMPT


@tool
async def analyze_food_image(image_url: str, config: RunnableConfig) -> str:
    """
    Asks the vision model for meal-level nutrition totals of a food image.

    Args:
        image_url: Base64 data URL, e.g. "data:image/png;base64,...".

    Returns:
        The model's raw text reply, or "" when it returned no content.
    """
    settings = (config.get("configurable") or {}).get("settings") or get_settings()
    client = get_vision_client(settings.openai_api_key)

    completion = await client.chat.completions.create(
        model=settings.model,
        response_format={"type": "json_object"},
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": NUTRITION_PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": image_url,
                            "detail": settings.image_detail,
                        },
                    },
                ],
            }
        ],
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )

    if not completion.choices:
        return ""
    return completion.choices[0].message.content or ""
