"""Analiz sonucu şemaları. Wire ve geçmiş (JSON sütunu) formatı camelCase."""
import re
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

HealthImpact = Literal["positive", "neutral", "concern", "warning"]
Confidence = Literal["low", "medium", "high"]

HEALTH_IMPACTS = get_args(HealthImpact)
CONFIDENCES = get_args(Confidence)
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

MIN_HEALTH_SCORE = 1
MAX_HEALTH_SCORE = 10


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class IngredientInsight(CamelModel):
    name: str
    explanation: str = ""
    health_impact: HealthImpact = "neutral"
    impacts: list[str] = []
    tradeoffs: str | None = None
    alternatives: list[str] | None = None
    confidence: Confidence = "medium"

    # Model bazen "HIGH" / "Concern" ya da listede olmayan değerler döndürüyor
    @field_validator("health_impact", mode="before")
    @classmethod
    def normalize_impact(cls, v: Any) -> str:
        v = v.strip().lower() if isinstance(v, str) else v
        return v if v in HEALTH_IMPACTS else "neutral"

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, v: Any) -> str:
        v = v.strip().lower() if isinstance(v, str) else v
        return v if v in CONFIDENCES else "medium"


class HealthProfile(CamelModel):
    concerns: list[str] = []
    inferred: bool = False


class AnalysisResult(CamelModel):
    product_name: str | None = None
    ingredients: list[str] | None = None
    insights: list[IngredientInsight] = []
    summary: str = ""
    health_profile: HealthProfile | None = None
    health_score: int | None = None
    concerns: list[str] | None = None
    recommendations: list[str] | None = None
    allergen_alerts: list[str] | None = None
    drug_interactions: list[str] | None = None
    error: str | None = None

    @field_validator("health_score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> int | None:
        """"7/10" gibi metinlerde ilk sayı alınır; sayı yoksa skor yok (None)."""
        if isinstance(v, str):
            match = _NUMBER.search(v)
            v = float(match.group()) if match else None
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return max(MIN_HEALTH_SCORE, min(MAX_HEALTH_SCORE, int(round(v))))

    def to_json(self) -> dict[str, Any]:
        """Geçmiş tablosuna ve istemciye giden camelCase sözlük."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalyzeIngredientsRequest(CamelModel):
    query: str | None = None
    extracted_text: str | None = None
    product_name: str | None = None
    health_concerns: list[str] | None = None
