from __future__ import annotations

import json
import logging
from typing import Any, Dict

from langchain_core.runnables import RunnableConfig
from openai import OpenAIError
from pydantic import ValidationError

from api.config import Settings, get_settings
from api.schemas import NutritionResult, ParseFailureResponse
from pipeline.state import AnalysisState
from pipeline.tools import analyze_food_image

log = logging.getLogger(__name__)

IMAGE_PREFIX = "data:image/"

IMAGE_REQUIRED = "Image is required"
INVALID_IMAGE_FORMAT = "Invalid image format. Expected base64 data URL"
API_KEY_MISSING = "OpenAI API key not configured"
NO_RESPONSE = "No response from OpenAI"
PARSE_FAILED = "Could not parse nutritional data"
PARSE_FAILED_MESSAGE = "AI analysis completed but JSON parsing failed"
ANALYSIS_FAILED = "Failed to analyze image"


def _settings(config: RunnableConfig) -> Settings:
    return (config.get("configurable") or {}).get("settings") or get_settings()


def _terminal(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {"status_code": status_code, "body": body, "error": body.get("error")}


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not valid JSON")


def parse_json(raw: Any) -> Any:
    """Strict `json.loads`: `NaN` and `Infinity` are rejected like any other bad token."""
    return json.loads(raw, parse_constant=_reject_constant)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, (str, int, float)) and not value)


def failure_body(exc: BaseException) -> Dict[str, Any]:
    """Body for any failure outside the classified branches."""
    if exc.args and isinstance(exc.args[0], str):
        details = exc.args[0]
    else:
        details = str(exc)
    return {"error": ANALYSIS_FAILED, "details": details or "Unknown error"}


def node_validate(state: AnalysisState) -> Dict[str, Any]:
    """Rejects requests without a data URL image."""
    image = state.get("image")

    if _is_blank(image):
        log.info("[VALIDATE] missing image")
        return _terminal(400, {"error": IMAGE_REQUIRED})

    if not isinstance(image, str):
        raise TypeError(f"image must be a string, got {type(image).__name__}")

    if not image.startswith(IMAGE_PREFIX):
        log.info("[VALIDATE] rejected image, prefix=%r", image[:16])
        return _terminal(400, {"error": INVALID_IMAGE_FORMAT})

    log.info("[VALIDATE] data URL accepted, %d chars", len(image))
    return {"error": None}


def node_check_config(state: AnalysisState, config: RunnableConfig) -> Dict[str, Any]:
    """Stops before any client is built when the credential is missing."""
    if not _settings(config).openai_api_key:
        log.error("[CONFIG] OPENAI_API_KEY is not set")
        return _terminal(500, {"error": API_KEY_MISSING})
    return {}


async def node_vision(state: AnalysisState, config: RunnableConfig) -> Dict[str, Any]:
    """Node wrapper around the OpenAI vision tool."""
    settings = _settings(config)
    log.info("[VISION] model=%s detail=%s", settings.model, settings.image_detail)

    try:
        raw = await analyze_food_image.ainvoke({"image_url": state["image"]}, config)
    except OpenAIError as e:
        log.error("[VISION] %s", e)
        return _terminal(500, failure_body(e))

    if not raw:
        log.warning("[VISION] empty response")
        return _terminal(500, {"error": NO_RESPONSE})

    log.info("[VISION] %d chars received", len(raw))
    return {"raw_response": raw}


def node_parse(state: AnalysisState, config: RunnableConfig) -> Dict[str, Any]:
    """
    Parses the model reply into the nutrition result.

    A reply that is not JSON (or, in strict mode, not a `NutritionResult`)
    still answers 200, carrying the raw text for diagnostics.
    """
    raw = state["raw_response"]
    soft_failure = ParseFailureResponse(
        error=PARSE_FAILED, raw_response=raw, message=PARSE_FAILED_MESSAGE
    ).model_dump()

    try:
        result = parse_json(raw)
    except ValueError as e:
        log.warning("[PARSE] invalid JSON: %s", e)
        return _terminal(200, soft_failure)

    if _settings(config).strict_schema:
        try:
            NutritionResult.model_validate(result)
        except ValidationError as e:
            log.warning("[PARSE] schema mismatch: %d errors", e.error_count())
            return _terminal(200, soft_failure)

    log.info("[PARSE] ok")
    return {"result": result, "status_code": 200, "body": result, "error": None}
