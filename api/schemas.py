from typing import List, Optional

from pydantic import BaseModel


class AnalysisRequest(BaseModel):
    image: Optional[str] = None


class TotalNutrition(BaseModel):
    food_names: List[str]
    quantity: str
    calories: float
    carbs: float
    fat: float
    protein: float


class NutritionResult(BaseModel):
    total: TotalNutrition
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class ParseFailureResponse(BaseModel):
    error: str
    raw_response: str
    message: str
