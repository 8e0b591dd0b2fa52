from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class AnalysisHistory(SQLModel, table=True):
    """Tamamlanan her analiz için bir satır (append-only; sadece kullanıcı silebilir)."""
    __tablename__ = "analysis_history"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    product_name: str | None = None
    query: str | None = None
    analysis_result: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
