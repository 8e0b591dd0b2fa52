"""Dashboard istatistikleri: her çağrıda geçmişin tamamından baştan hesaplanır (önbellek yok)."""
import logging
import random
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from app.schemas.analysis import AnalysisResult
from app.schemas.dashboard import DashboardStats, IngredientAlert, NutritionScore, Recommendation, TrendPoint
from app.services.concerns import CONCERN_IDS

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5
RISK_BELOW = 5
SAFE_FROM = 7
FLAGGED_IMPACTS = ("concern", "warning")
NO_CONCERN = "None detected"
WEEK_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MAX_ALERTS = 4
MAX_RECOMMENDATIONS = 3

# Profil katalog etiketi -> öneri kartı
CONCERN_RECOMMENDATIONS = MappingProxyType({
    "diabetic": Recommendation(
        title="Low-GI Alternatives",
        description="Switch to whole grain options for better blood sugar control",
        match=94,
    ),
    "vegan": Recommendation(
        title="Plant-Based Protein",
        description="Try legume-based products for complete nutrition",
        match=89,
    ),
    "allergies": Recommendation(
        title="Allergen-Free Options",
        description="Consider products with clean ingredient lists",
        match=91,
    ),
    "heart-health": Recommendation(
        title="Heart-Healthy Choices",
        description="Opt for products with omega-3s and low sodium",
        match=87,
    ),
})
DEFAULT_RECOMMENDATIONS = (
    Recommendation(title="Whole Food Focus", description="Choose products with fewer processed ingredients", match=85),
    Recommendation(title="Label Reading", description="Check for hidden sugars and additives", match=82),
)

# Katalogla senkron kalmalı
if not set(CONCERN_RECOMMENDATIONS) <= CONCERN_IDS:
    raise RuntimeError("Recommendation keys must be concern catalog ids.")

GRADES = ((9, "A+"), (8, "A"), (7, "B+"), (6, "B"), (5, "C"), (4, "D"))


def grade(score: int) -> str:
    for threshold, label in GRADES:
        if score >= threshold:
            return label
    return "F"


def score_label(score: int | None) -> str | None:
    """Sağlık skoru kartındaki etiket."""
    if score is None:
        return None
    if score >= 8:
        return "Excellent"
    if score >= 6:
        return "Good"
    if score >= 4:
        return "Moderate"
    return "Poor"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _score(result: AnalysisResult) -> int:
    return result.health_score or NEUTRAL_SCORE


def _severity(count: int) -> str:
    if count >= 3:
        return "high"
    if count >= 2:
        return "medium"
    return "low"


def generate_recommendations(health_concerns: Iterable[str]) -> list[Recommendation]:
    concerns = set(health_concerns)
    recs = [rec for tag, rec in CONCERN_RECOMMENDATIONS.items() if tag in concerns]
    if not recs:
        recs = list(DEFAULT_RECOMMENDATIONS)
    return recs[:MAX_RECOMMENDATIONS]


def weekly_trend(rng: random.Random | None = None) -> list[TrendPoint]:
    """Gerçek tarihlere dayanmayan yer tutucu trend; her çağrıda rastgele."""
    rng = rng or random.Random()
    return [
        TrendPoint(
            day=day,
            risk=rng.randrange(3) + (2 if i < 3 else 0),
            safe=rng.randrange(4) + (2 if i > 3 else 1),
        )
        for i, day in enumerate(WEEK_DAYS)
    ]


def _results(history: Iterable[Mapping[str, Any] | AnalysisResult | None]) -> list[AnalysisResult]:
    results = []
    for item in history:
        if not item:
            continue
        if isinstance(item, AnalysisResult):
            results.append(item)
            continue
        try:
            results.append(AnalysisResult.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping unreadable analysis_result: %s", e)
    return results


def aggregate_history(
    history: Iterable[Mapping[str, Any] | AnalysisResult | None],
    health_concerns: Iterable[str] = (),
    rng: random.Random | None = None,
) -> DashboardStats:
    """
    history: analysis_result değerleri (boş olanlar atlanır).
    Aynı girdiyle tekrar çağrıldığında weekly_trend dışındaki tüm alanlar aynıdır.
    """
    analyses = _results(history)
    total_scans = len(analyses)
    scores = [_score(a) for a in analyses]
    avg_health_score = _round_half_up(sum(scores) / total_scans) if total_scans else 0
    risk_products = sum(1 for s in scores if s < RISK_BELOW)
    safe_products = sum(1 for s in scores if s >= SAFE_FROM)

    ingredient_counts: dict[str, int] = {}
    for analysis in analyses:
        for insight in analysis.insights:
            if insight.health_impact in FLAGGED_IMPACTS:
                ingredient_counts[insight.name] = ingredient_counts.get(insight.name, 0) + 1
    # sorted() kararlı: eşitlikte ilk görülen önde kalır
    ranked = sorted(ingredient_counts.items(), key=lambda kv: kv[1], reverse=True)
    top_concern, top_count = ranked[0] if ranked else (NO_CONCERN, 0)
    top_concern_percentage = _round_half_up(top_count / total_scans * 100) if total_scans else 0

    recent_alerts = [
        IngredientAlert(ingredient=name, count=count, severity=_severity(count))
        for name, count in ranked[:MAX_ALERTS]
    ]

    overall = avg_health_score or NEUTRAL_SCORE
    nutrition_breakdown = [
        NutritionScore(category="Sugar Control", score=min(10, max(1, 10 - risk_products)), label=grade(10 - risk_products)),
        NutritionScore(category="Allergen Safety", score=8, label=grade(8)),
        NutritionScore(category="Additive Score", score=min(10, max(1, avg_health_score)), label=grade(avg_health_score)),
        NutritionScore(category="Overall Health", score=overall, label=grade(overall)),
    ]

    return DashboardStats(
        total_scans=total_scans,
        avg_health_score=avg_health_score,
        risk_products=risk_products,
        safe_products=safe_products,
        top_concern=top_concern,
        top_concern_percentage=top_concern_percentage,
        weekly_trend=weekly_trend(rng),
        recent_alerts=recent_alerts,
        recommendations=generate_recommendations(health_concerns),
        nutrition_breakdown=nutrition_breakdown,
    )
