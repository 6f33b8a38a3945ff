"""
Food Analyzer - asks the LLM for a nutrition breakdown of a photo or a text description.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError

from ..llm.base import LLMError, LLMProvider, LLMMessage
from ..models.meal import NutritionData

logger = logging.getLogger(__name__)

NUTRITION_EXPERT_PROMPT = """You are a nutrition expert. Analyze the input (image or text) and return ONLY a JSON object with this exact structure:
{
  "items": [
    {
      "name": "descriptive name (in English)",
      "calories": number,
      "protein": number (grams),
      "carbs": number (grams),
      "fats": number (grams),
      "weight": number (estimated grams)
    }
  ],
  "totalCalories": number,
  "totalProtein": number,
  "totalCarbs": number,
  "totalFats": number,
  "confidence": number (0-1)
}

Rules:
1. Detect ALL food items.
2. Estimate weight/portion for each item. Default to an average portion if not specified.
3. Calculate totals accurately.
4. If the input is not food, or the image is blurry or unclear, return "items": []
5. Input may be in English, Russian or Uzbek. Name foods in English, keeping a local name in parentheses when it is specific (e.g., "Plov (Uzbek Rice Dish)").
6. Return ONLY JSON."""

# AnalysisResult.error codes
NOT_CONFIGURED = "not_configured"
NOT_FOOD = "not_food"
ANALYSIS_FAILED = "analysis_failed"
LLM_UNAVAILABLE = "llm_unavailable"


@dataclass
class AnalysisResult:
    success: bool
    data: Optional[NutritionData] = None
    error: Optional[str] = None


class FoodAnalyzer:
    """Nutrition estimation through a JSON-mode LLM call."""

    def __init__(self, llm: Optional[LLMProvider], temperature: float = 0.3, max_tokens: int = 800):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def analyze_image(self, image_base64: str, media_type: str = "image/jpeg") -> AnalysisResult:
        message = LLMMessage.image(
            "user",
            "Analyze this food image and return the nutritional information in JSON format.",
            image_base64,
            media_type,
        )
        return await self._analyze(message)

    async def analyze_text(self, text: str) -> AnalysisResult:
        return await self._analyze(LLMMessage.text("user", f'Analyze this food text: "{text}"'))

    async def _analyze(self, message: LLMMessage) -> AnalysisResult:
        if self.llm is None:
            return AnalysisResult(False, error=NOT_CONFIGURED)

        try:
            response = await self.llm.chat_completion(
                [LLMMessage.text("system", NUTRITION_EXPERT_PROMPT), message],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except httpx.HTTPError:
            # already logged by the provider
            return AnalysisResult(False, error=LLM_UNAVAILABLE)
        except LLMError:
            return AnalysisResult(False, error=ANALYSIS_FAILED)

        try:
            payload = response.json()
            if not isinstance(payload.get("items"), list):
                return AnalysisResult(False, error=ANALYSIS_FAILED)
            data = NutritionData.model_validate(payload)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Unparseable nutrition response: {e}")
            return AnalysisResult(False, error=ANALYSIS_FAILED)

        if not data.items:
            return AnalysisResult(False, error=NOT_FOOD)
        if not data.total_calories:
            data.total_calories = sum(i.calories for i in data.items)
            data.total_protein = sum(i.protein for i in data.items)
            data.total_carbs = sum(i.carbs for i in data.items)
            data.total_fats = sum(i.fats for i in data.items)

        logger.info(
            "Food analyzed",
            extra={"extra_fields": {
                "items": len(data.items),
                "total_calories": data.total_calories,
                "confidence": data.confidence,
            }}
        )
        return AnalysisResult(True, data=data)
