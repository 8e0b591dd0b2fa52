from typing import Any

from pydantic import BaseModel


class HistoryItem(BaseModel):
    id: int
    product_name: str | None = None
    query: str | None = None
    health_score: int | None = None
    health_score_label: str | None = None
    created_at: str


class HistoryDetail(HistoryItem):
    analysis_result: dict[str, Any] | None = None
