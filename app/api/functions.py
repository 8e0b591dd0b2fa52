"""analyze-ingredients edge fonksiyonu: payload -> prompt -> gateway -> AnalysisResult JSON."""
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.core.rate_limit import ANALYSIS_LIMIT, ANALYSIS_SCOPE, limiter
from app.schemas import AnalyzeIngredientsRequest
from app.services.analyze import analyze_ingredients

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@router.options("/analyze-ingredients")
def analyze_ingredients_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/analyze-ingredients")
@limiter.shared_limit(ANALYSIS_LIMIT, scope=ANALYSIS_SCOPE)
def analyze_ingredients_endpoint(request: Request, body: AnalyzeIngredientsRequest):
    """
    Gövde: {query?, extractedText?, productName?, healthConcerns?}.
    429/402 gateway hataları aynı kodla, diğerleri 500 olarak {"error": ...} döner.
    """
    result = analyze_ingredients(
        query=body.query,
        extracted_text=body.extracted_text,
        product_name=body.product_name,
        health_concerns=body.health_concerns,
    )
    return JSONResponse(content=result.to_json(), headers=CORS_HEADERS)
