"""IP bazlı rate limiting (SlowAPI).

Limitler dakika başına RATE_LIMIT_PER_MINUTE'dan türetilir; analiz uçları gateway
kotasını korumak için ayrıca sayılır.
"""
from fastapi import Request
from slowapi import Limiter

from .config import settings


def client_ip(request: Request) -> str:
    """Proxy arkasında X-Forwarded-For'daki ilk adres."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.client.host if request.client and request.client.host else "127.0.0.1"


def per_minute(count: int | None = None) -> str:
    return f"{count or settings.rate_limit_per_minute}/minute"


limiter = Limiter(key_func=client_ip)

AUTH_LIMIT = per_minute()
# Sohbet ve edge fonksiyonu aynı kovayı paylaşır
ANALYSIS_LIMIT = per_minute()
ANALYSIS_SCOPE = "analysis"
