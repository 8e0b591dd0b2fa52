from typing import Literal

from .analysis import CamelModel

Severity = Literal["high", "medium", "low"]


class TrendPoint(CamelModel):
    day: str
    risk: int
    safe: int


class IngredientAlert(CamelModel):
    ingredient: str
    count: int
    severity: Severity


class Recommendation(CamelModel):
    title: str
    description: str
    match: int


class NutritionScore(CamelModel):
    category: str
    score: int
    label: str


class DashboardStats(CamelModel):
    total_scans: int
    avg_health_score: int
    risk_products: int
    safe_products: int
    top_concern: str
    top_concern_percentage: int
    weekly_trend: list[TrendPoint]
    recent_alerts: list[IngredientAlert]
    recommendations: list[Recommendation]
    nutrition_breakdown: list[NutritionScore]
