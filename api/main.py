from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import Settings, get_settings
from api.schemas import (
    AnalysisRequest,
    ErrorResponse,
    NutritionResult,
)
from pipeline.graph import pipeline
from pipeline.nodes import failure_body, parse_json
from pipeline.state import AnalysisState

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)

app = FastAPI(
    title="Food Nutrition Vision API",
    version="1.0.0",
    description="Meal-level nutrition estimates from a food photo via an OpenAI vision model.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post(
    "/api/analyze-food",
    responses={
        200: {"model": NutritionResult},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": AnalysisRequest.model_json_schema()}},
        }
    },
)
async def analyze_food(
    request: Request,
    settings: Settings = Depends(get_settings),
):
    """
    Estimate total nutrition for the meal in a base64 data URL image.

    The body is read by hand so that unreadable JSON is reported like any
    other failure: 500 with `details`.
    """
    try:
        payload = parse_json(await request.body())
        if payload is None:
            raise TypeError("request body must be a JSON object")

        state: AnalysisState = {
            "image": payload.get("image") if isinstance(payload, dict) else None,
            "raw_response": None,
            "result": None,
            "status_code": None,
            "body": None,
            "error": None,
        }

        # Invoke the graph
        result = await pipeline.ainvoke(
            state, config={"configurable": {"settings": settings}}
        )

        return JSONResponse(result.get("body"), status_code=result.get("status_code") or 200)
    except Exception as e:
        log.exception("Error analyzing food: %s", e)
        return JSONResponse(failure_body(e), status_code=500)


@app.get("/graph/ascii")
def graph_ascii():
    """
    Return an ASCII representation of the pipeline graph.
    """
    return {"graph": pipeline.get_graph().draw_ascii()}


@app.get("/graph/mermaid")
def graph_mermaid():
    """
    Return Mermaid source for visualizing the pipeline graph.
    """
    return {"mermaid": pipeline.get_graph().draw_mermaid()}


@app.get("/health")
def health():
    """
    Basic health check.
    """
    return {"status": "ok"}
