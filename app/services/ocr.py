"""Etiket fotoğrafından metin çıkarma (Tesseract, pytesseract üzerinden).

Motorun kendisi dışarıda: görsel girer, metin + 0-100 güven puanı çıkar.
"""
from __future__ import annotations

import logging
import re
from io import BytesIO
from typing import Callable

import pytesseract
from PIL import Image
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_MESSAGE = "Could not read text clearly. Try better lighting or a clearer image."
FAILURE_MESSAGE = "Failed to process image. Please try again."

# (görsel baytları, dil) -> (metin, güven)
Recognizer = Callable[[bytes, str], tuple[str, float]]

_INGREDIENT_SECTION = (
    re.compile(r"ingredients?[:\s]+([^.]+)", re.IGNORECASE),
    re.compile(r"contains?[:\s]+([^.]+)", re.IGNORECASE),
)
_PARENTHETICAL = re.compile(r"\([^)]*\)")


class OCRResult(BaseModel):
    text: str
    confidence: float
    success: bool
    error: str | None = None


def tesseract_recognize(image_bytes: bytes, lang: str) -> tuple[str, float]:
    """Pillow ile açar, kelime bazlı güvenlerin ortalamasını döner (-1 olan kutular sayılmaz)."""
    img = Image.open(BytesIO(image_bytes)).convert("RGB")
    data = pytesseract.image_to_data(img, lang=lang, output_type=pytesseract.Output.DICT)
    words: list[str] = []
    confidences: list[float] = []
    for word, conf in zip(data.get("text", []), data.get("conf", [])):
        conf = float(conf)
        if conf < 0:
            continue
        confidences.append(conf)
        if word and word.strip():
            words.append(word.strip())
    text = pytesseract.image_to_string(img, lang=lang) if words else ""
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return text, confidence


def extract_text(
    image_bytes: bytes,
    lang: str | None = None,
    recognizer: Recognizer | None = None,
) -> OCRResult:
    """
    Boş metin veya eşik altı güven (varsayılan 30) başarısız sayılır.
    Motor/decode hataları da aynı başarısız şekle çevrilir; ikisi ayırt edilmez.
    """
    recognize = recognizer or tesseract_recognize
    try:
        raw_text, confidence = recognize(image_bytes, lang or settings.ocr_language)
    except Exception as e:
        logger.exception("OCR error: %s", e)
        return OCRResult(text="", confidence=0, success=False, error=FAILURE_MESSAGE)

    text = (raw_text or "").strip()
    if not text or confidence < settings.ocr_min_confidence:
        logger.info("OCR rejected: text_len=%s confidence=%.1f", len(text), confidence)
        return OCRResult(text="", confidence=0, success=False, error=LOW_CONFIDENCE_MESSAGE)
    return OCRResult(text=text, confidence=confidence, success=True)


def extract_ingredients(ocr_text: str) -> list[str]:
    """Etiket metninden içindekiler listesini ayıklar; tekrarlar atılır, sıra korunur."""
    ingredient_text = ocr_text or ""
    for pattern in _INGREDIENT_SECTION:
        match = pattern.search(ingredient_text)
        if match:
            ingredient_text = match.group(1)
            break

    items = []
    for part in re.split(r"[,;]", ingredient_text):
        part = part.strip()
        if not (1 < len(part) < 100):
            continue
        part = _PARENTHETICAL.sub("", part).strip()
        if part:
            items.append(part)
    return list(dict.fromkeys(items))
