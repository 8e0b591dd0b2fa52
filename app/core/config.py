from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: app/core/config.py -> app/core -> app -> proje kökü
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

ANALYSIS_MODES = ("remote", "offline")


class Settings(BaseSettings):
    # OpenAI uyumlu AI gateway (chat/completions)
    ai_gateway_api_key: str = ""
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1"
    ai_model: str = "google/gemini-2.5-flash"
    ai_timeout: float = 60.0
    # remote: gateway'e gider; offline: sabit mock tablosu kullanılır
    analysis_mode: str = "remote"
    ocr_language: str = "eng"
    ocr_min_confidence: float = 30.0
    # Offline modda "düşünüyor" hissi için yapay gecikmeler (saniye)
    mock_latency_seconds: float = 1.5
    summary_delay_seconds: float = 0.5
    secret_key: str = "change-me-in-production"
    database_url: str = "sqlite:///./copilot.db"
    # CORS: virgülle ayrılmış origin listesi
    cors_origins: str = "*"
    # IP başına dakikada max istek (rate limit)
    rate_limit_per_minute: int = 60
    # JWT ömrü (dakika), varsayılan 7 gün
    access_token_expire_minutes: int = 60 * 24 * 7
    log_level: str = "INFO"
    upload_max_mb: int = 10
    environment: str = "development"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("ai_gateway_api_key", mode="before")
    @classmethod
    def strip_api_key(cls, v: str | None) -> str:
        """Boşluk/yanlış kopya kaynaklı hataları azaltır."""
        return (v or "").strip()

    @field_validator("analysis_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: str | None) -> str:
        mode = (v or "remote").strip().lower()
        if mode not in ANALYSIS_MODES:
            raise ValueError(f"ANALYSIS_MODE must be one of {', '.join(ANALYSIS_MODES)}")
        return mode


settings = Settings()


def is_gateway_configured() -> bool:
    """AI gateway anahtarı tanımlı mı?"""
    return bool(settings.ai_gateway_api_key)


def is_offline_mode() -> bool:
    return settings.analysis_mode == "offline"
