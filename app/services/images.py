"""Yüklenen etiket görselleri için bellek içi önizleme referansları.

Her referans açıkça bırakılmalı (yeni seçim, temizleme, gönderim sonrası); aksi halde
uzun oturumlarda birikir.
"""
import logging
import secrets
import threading
from dataclasses import dataclass

from fastapi import HTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}
PREVIEW_URL_PREFIX = "/previews/"


@dataclass(frozen=True)
class Preview:
    token: str
    content: bytes
    content_type: str

    @property
    def url(self) -> str:
        return PREVIEW_URL_PREFIX + self.token


class PreviewStore:
    def __init__(self) -> None:
        self._items: dict[str, Preview] = {}
        self._lock = threading.Lock()

    def create(self, content: bytes, content_type: str) -> Preview:
        preview = Preview(token=secrets.token_urlsafe(16), content=content, content_type=content_type)
        with self._lock:
            self._items[preview.token] = preview
        return preview

    def get(self, token: str) -> Preview | None:
        with self._lock:
            return self._items.get(token)

    def release(self, token: str) -> bool:
        with self._lock:
            return self._items.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


preview_store = PreviewStore()


def validate_image(content: bytes, content_type: str | None) -> str:
    """Görsel tipini ve boyutunu kontrol eder; geçerli content type'ı döner."""
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Only JPG, PNG or WEBP images are supported.")
    if not content:
        raise HTTPException(status_code=400, detail="Image is empty.")
    max_bytes = settings.upload_max_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Image must be at most {settings.upload_max_mb} MB.")
    return ctype
