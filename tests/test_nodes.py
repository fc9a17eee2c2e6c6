from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from openai import OpenAIError

from api.config import Settings
from pipeline.nodes import (
    failure_body,
    node_check_config,
    node_parse,
    node_validate,
    node_vision,
)

NUTRITION_JSON = (
    '{"total":{"food_names":["apple"],"quantity":"combined meal",'
    '"calories":95,"carbs":25,"fat":0,"protein":0},"message":"A single apple"}'
)


def base_state(**kw):
    state = {
        "image": "data:image/png;base64,AAAA",
        "raw_response": None,
        "result": None,
        "status_code": None,
        "body": None,
        "error": None,
    }
    state.update(kw)
    return state


def run_config(**kw):
    kw.setdefault("openai_api_key", "sk-test")
    return {"configurable": {"settings": Settings(**kw)}}


def test_validate_missing_image():
    for image in (None, ""):
        result = node_validate(base_state(image=image))
        assert result["status_code"] == 400
        assert result["body"] == {"error": "Image is required"}


def test_validate_rejects_non_data_url():
    for image in ("not-a-data-url", "https://example.com/a.png", "data:text/plain;base64,AAAA"):
        result = node_validate(base_state(image=image))
        assert result["status_code"] == 400
        assert result["body"] == {"error": "Invalid image format. Expected base64 data URL"}


def test_validate_accepts_any_payload_after_prefix():
    result = node_validate(base_state(image="data:image/whatever"))
    assert "body" not in result
    assert result["error"] is None


def test_check_config_missing_key():
    result = node_check_config(base_state(), run_config(openai_api_key=None))
    assert result["status_code"] == 500
    assert result["body"] == {"error": "OpenAI API key not configured"}


def test_check_config_with_key():
    assert node_check_config(base_state(), run_config()) == {}


@patch("pipeline.nodes.analyze_food_image")
def test_vision_returns_text(mock_tool):
    mock_tool.ainvoke = AsyncMock(return_value=NUTRITION_JSON)
    result = asyncio.run(node_vision(base_state(), run_config()))
    assert result == {"raw_response": NUTRITION_JSON}
    assert mock_tool.ainvoke.await_args.args[0] == {"image_url": "data:image/png;base64,AAAA"}


@patch("pipeline.nodes.analyze_food_image")
def test_vision_empty(mock_tool):
    mock_tool.ainvoke = AsyncMock(return_value="")
    result = asyncio.run(node_vision(base_state(), run_config()))
    assert result["status_code"] == 500
    assert result["body"] == {"error": "No response from OpenAI"}


@patch("pipeline.nodes.analyze_food_image")
def test_vision_upstream_error(mock_tool):
    mock_tool.ainvoke = AsyncMock(side_effect=OpenAIError("Connection error."))
    result = asyncio.run(node_vision(base_state(), run_config()))
    assert result["status_code"] == 500
    assert result["body"] == {"error": "Failed to analyze image", "details": "Connection error."}


def test_parse_success_is_verbatim():
    result = node_parse(base_state(raw_response=NUTRITION_JSON), run_config())
    assert result["status_code"] == 200
    assert result["body"]["total"]["food_names"] == ["apple"]
    assert result["body"]["message"] == "A single apple"
    assert result["result"] is result["body"]


def test_parse_invalid_json_is_soft_failure():
    raw = "Sorry, I can't tell what this is."
    result = node_parse(base_state(raw_response=raw), run_config())
    assert result["status_code"] == 200
    assert result["body"] == {
        "error": "Could not parse nutritional data",
        "raw_response": raw,
        "message": "AI analysis completed but JSON parsing failed",
    }


def test_parse_trusts_shape_by_default():
    raw = '{"total": {"calories": "lots"}}'
    result = node_parse(base_state(raw_response=raw), run_config())
    assert result["body"] == {"total": {"calories": "lots"}}


def test_parse_strict_schema_mismatch():
    raw = '{"total": {"calories": "lots"}}'
    result = node_parse(base_state(raw_response=raw), run_config(strict_schema=True))
    assert result["status_code"] == 200
    assert result["body"]["error"] == "Could not parse nutritional data"
    assert result["body"]["raw_response"] == raw


def test_parse_strict_schema_match():
    result = node_parse(base_state(raw_response=NUTRITION_JSON), run_config(strict_schema=True))
    assert result["body"]["total"]["calories"] == 95


def test_validate_falsy_values_are_missing():
    for image in (0, False, 0.0):
        result = node_validate(base_state(image=image))
        assert result["body"] == {"error": "Image is required"}


def test_validate_non_string_image_raises():
    for image in (123, True, [], {"url": "data:image/png;base64,AAAA"}):
        with pytest.raises(TypeError):
            node_validate(base_state(image=image))


def test_parse_rejects_non_finite_constants():
    for token in ("NaN", "Infinity", "-Infinity"):
        raw = '{"total": {"calories": %s}, "message": "m"}' % token
        for strict in (False, True):
            result = node_parse(base_state(raw_response=raw), run_config(strict_schema=strict))
            assert result["status_code"] == 200
            assert result["body"]["error"] == "Could not parse nutritional data"
            assert result["body"]["raw_response"] == raw


def test_failure_body_uses_plain_message():
    assert failure_body(KeyError("choices")) == {"error": "Failed to analyze image", "details": "choices"}
    assert failure_body(OpenAIError("Connection error."))["details"] == "Connection error."
    assert failure_body(RuntimeError())["details"] == "Unknown error"
