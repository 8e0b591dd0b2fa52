import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException
from openai import APIConnectionError, APIError, APIStatusError, OpenAI, RateLimitError
from pydantic import ValidationError

from app.core.config import is_gateway_configured, settings
from app.schemas.analysis import AnalysisResult, IngredientInsight
from app.services.ocr import extract_ingredients

logger = logging.getLogger(__name__)

RATE_LIMITED_DETAIL = "Rate limits exceeded. Please try again in a moment."
CREDITS_EXHAUSTED_DETAIL = "AI credits exhausted. Please add more credits."
UNPARSED_RECOMMENDATION = "Unable to parse detailed analysis. Please try again."
NEUTRAL_HEALTH_SCORE = 5

# Anahtar başına bir istemci (önbelleklenmiş)
_gateway_clients: dict[str, OpenAI] = {}

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")

SYSTEM_PROMPT_TEMPLATE = """You are an expert nutritionist and food scientist AI assistant called "Ingredient Co-Pilot". Your role is to analyze food ingredients and provide personalized health insights.

IMPORTANT GUIDELINES:
1. Always be factual and cite scientific evidence when possible
2. Consider the user's health concerns: {concerns}
3. Provide balanced perspectives - mention both benefits and risks
4. Rate your confidence as LOW, MEDIUM, or HIGH
5. Suggest healthier alternatives when appropriate
6. Flag potential allergens and interactions
7. Use clear, non-technical language

RESPONSE FORMAT:
You MUST respond with valid JSON in this exact structure:
{{
  "productName": "Name of the product",
  "healthScore": 1-10 (10 being healthiest),
  "summary": "Brief 2-3 sentence summary",
  "concerns": ["List of flagged health concerns based on user profile"],
  "insights": [
    {{
      "name": "Ingredient name",
      "explanation": "What this ingredient is",
      "healthImpact": "positive" | "neutral" | "concern" | "warning",
      "impacts": ["Impact 1", "Impact 2"],
      "tradeoffs": "Balanced perspective on this ingredient",
      "alternatives": ["Alternative 1", "Alternative 2"],
      "confidence": "low" | "medium" | "high"
    }}
  ],
  "recommendations": ["Recommendation 1", "Recommendation 2"],
  "allergenAlerts": ["List any allergens detected"],
  "drugInteractions": ["Potential drug-food interactions if user is on medications"]
}}"""


@dataclass(frozen=True)
class Parsed:
    result: AnalysisResult


@dataclass(frozen=True)
class Unparsed:
    raw_text: str


def _get_client() -> OpenAI:
    """Gateway için OpenAI uyumlu istemci. Tek çağrı: SDK'nın kendi retry'ı kapalı."""
    key = settings.ai_gateway_api_key
    if key not in _gateway_clients:
        _gateway_clients[key] = OpenAI(
            api_key=key,
            base_url=settings.ai_gateway_url,
            timeout=settings.ai_timeout,
            max_retries=0,
        )
    return _gateway_clients[key]


def _concerns_text(health_concerns: list[str] | None) -> str:
    return ", ".join(health_concerns or []) or "None specified"


def build_system_prompt(health_concerns: list[str] | None) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(concerns=_concerns_text(health_concerns))


def build_user_message(
    query: str | None,
    extracted_text: str | None,
    product_name: str | None,
    health_concerns: list[str] | None,
) -> str:
    lines = ["Analyze the following food product:", ""]
    if product_name:
        lines.append(f"Product: {product_name}")
    if query:
        lines.append(f"User Query: {query}")
    if extracted_text:
        lines.append(f"Ingredients/Label Text: {extracted_text}")
    lines += [
        "",
        "User's Health Profile:",
        f"- Health Concerns: {_concerns_text(health_concerns)}",
        "",
        "Provide a comprehensive analysis focusing on their specific health needs. "
        "Be thorough but conversational.",
    ]
    return "\n".join(lines)


def _valid_insights(raw: Any) -> list[IngredientInsight]:
    if not isinstance(raw, list):
        return []
    insights = []
    for item in raw:
        try:
            insights.append(IngredientInsight.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping invalid insight from AI response: %s", e)
    return insights


def coerce_result(data: dict[str, Any]) -> AnalysisResult:
    """Şemaya uymayan alanlar atılır, gerisi korunur; geçersiz insight tek tek elenir."""
    data = dict(data)
    if "insights" in data:
        data["insights"] = _valid_insights(data["insights"])
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        bad_keys = {err["loc"][0] for err in e.errors() if err.get("loc")}
        logger.warning("Dropping invalid fields from AI response: %s", sorted(map(str, bad_keys)))
        return AnalysisResult.model_validate({k: v for k, v in data.items() if k not in bad_keys})


def parse_model_output(content: str) -> Parsed | Unparsed:
    """Model metninden JSON nesnesini çıkarır; ```json ... ``` çitleri varsa soyar.

    Unparsed yalnızca JSON çözülemediğinde ya da üst seviye bir nesne olmadığında döner.
    """
    match = _FENCED_JSON.search(content) or _FENCED_ANY.search(content)
    json_string = match.group(1) if match else content
    try:
        data = json.loads(json_string.strip())
    except ValueError as e:
        logger.error("Failed to parse AI response as JSON: %s", e)
        return Unparsed(content)
    if not isinstance(data, dict):
        logger.error("AI response JSON is not an object: %s", type(data).__name__)
        return Unparsed(content)
    try:
        return Parsed(coerce_result(data))
    except ValidationError as e:
        logger.error("AI response could not be coerced: %s", e)
        return Unparsed(content)


def fallback_result(raw_text: str, product_name: str | None) -> AnalysisResult:
    """Parse edilemeyen yanıt: ham metin özet olur, skor nötr (5), listeler boş; tek öneri tekrar denemeyi söyler."""
    return AnalysisResult(
        product_name=product_name or "Unknown Product",
        health_score=NEUTRAL_HEALTH_SCORE,
        summary=raw_text,
        concerns=[],
        insights=[],
        recommendations=[UNPARSED_RECOMMENDATION],
        allergen_alerts=[],
        drug_interactions=[],
    )


def _raise_gateway_http_error(exc: Exception) -> None:
    """Gateway hatalarını HTTP istisnalarına çevirir: 429 ve 402 ayrı mesajla, gerisi 500."""
    if isinstance(exc, RateLimitError):
        raise HTTPException(status_code=429, detail=RATE_LIMITED_DETAIL) from exc
    if isinstance(exc, APIStatusError):
        if exc.status_code == 402:
            raise HTTPException(status_code=402, detail=CREDITS_EXHAUSTED_DETAIL) from exc
        raise HTTPException(status_code=500, detail=f"AI gateway error: {exc.status_code}") from exc
    if isinstance(exc, APIConnectionError):
        raise HTTPException(status_code=500, detail="AI gateway unreachable.") from exc
    raise HTTPException(status_code=500, detail="Analysis failed") from exc


def request_completion(system_prompt: str, user_message: str) -> str:
    if not is_gateway_configured():
        raise HTTPException(status_code=500, detail="AI_GATEWAY_API_KEY is not configured")
    client = _get_client()
    try:
        response = client.chat.completions.create(
            model=settings.ai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        )
    except (APIStatusError, APIConnectionError, APIError) as e:
        logger.exception("AI gateway error: %s", e)
        _raise_gateway_http_error(e)
    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise HTTPException(status_code=500, detail="No response from AI")
    return content


def analyze_ingredients(
    query: str | None = None,
    extracted_text: str | None = None,
    product_name: str | None = None,
    health_concerns: list[str] | None = None,
) -> AnalysisResult:
    """Tek gateway çağrısı, retry yok. Parse hatası asla istisna olarak dışarı çıkmaz."""
    logger.info(
        "Analyzing ingredients: query_len=%s, text_len=%s, product=%s, concerns=%s",
        len(query or ""),
        len(extracted_text or ""),
        product_name,
        health_concerns,
    )
    content = request_completion(
        build_system_prompt(health_concerns),
        build_user_message(query, extracted_text, product_name, health_concerns),
    )
    outcome = parse_model_output(content)
    if isinstance(outcome, Unparsed):
        return fallback_result(outcome.raw_text, product_name)
    result = outcome.result
    if not result.ingredients and extracted_text:
        ingredients = extract_ingredients(extracted_text)
        if ingredients:
            result = result.model_copy(update={"ingredients": ingredients})
    return result
