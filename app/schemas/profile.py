from pydantic import BaseModel, field_validator

from app.services.concerns import CONCERN_IDS


class ProfileResponse(BaseModel):
    user_id: int
    display_name: str | None = None
    health_concerns: list[str] = []


class ProfileUpdate(BaseModel):
    display_name: str | None = None
    health_concerns: list[str] = []

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return (v or "").strip() or None

    @field_validator("health_concerns")
    @classmethod
    def known_concerns(cls, v: list[str]) -> list[str]:
        unknown = [c for c in v if c not in CONCERN_IDS]
        if unknown:
            raise ValueError(f"Unknown health concern: {', '.join(unknown)}")
        # Tekrarları at, sırayı koru
        return list(dict.fromkeys(v))


class ConcernOption(BaseModel):
    id: str
    label: str
    description: str
    category: str
    category_label: str
