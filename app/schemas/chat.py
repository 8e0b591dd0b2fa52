from datetime import datetime
from typing import Literal

from pydantic import Field

from .analysis import AnalysisResult, CamelModel, IngredientInsight


class ChatMessage(CamelModel):
    id: str
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: datetime
    image_url: str | None = None
    insights: list[IngredientInsight] | None = None
    is_loading: bool | None = None
    health_score: int | None = None
    concerns: list[str] | None = None
    recommendations: list[str] | None = None
    allergen_alerts: list[str] | None = None
    drug_interactions: list[str] | None = None


class ChatSessionResponse(CamelModel):
    id: str
    status: str
    is_loading: bool = False
    image_url: str | None = None
    health_concerns: list[str] = []
    messages: list[ChatMessage] = []


class SubmitMessageRequest(CamelModel):
    text: str = Field(default="", max_length=4000)


class SubmitMessageResponse(CamelModel):
    accepted: bool
    session: ChatSessionResponse
    analysis: AnalysisResult | None = None
    # Toast olarak gösterilecek kısa bildirim
    notice: str | None = None
    # Görsel okunamadıysa satır içi uyarı
    ocr_error: str | None = None
