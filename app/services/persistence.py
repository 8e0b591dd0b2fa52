"""analysis_history ve profiles tabloları için basit CRUD (tek tablo, transaction yok)."""
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.core.database import session_scope
from app.models import AnalysisHistory, Profile
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)

HistoryWriter = Callable[[str, AnalysisResult], None]


def save_analysis(db: Session, user_id: int, query: str | None, result: AnalysisResult) -> AnalysisHistory:
    entry = AnalysisHistory(
        user_id=user_id,
        product_name=result.product_name,
        query=query or None,
        analysis_result=result.to_json(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def make_history_writer(user_id: int) -> HistoryWriter:
    """Sohbet akışı için kendi oturumunu açan yazıcı (istek oturumundan bağımsız)."""
    def write(query: str, result: AnalysisResult) -> None:
        with session_scope() as db:
            save_analysis(db, user_id, query, result)

    return write


def list_history(db: Session, user_id: int, search: str | None = None) -> list[AnalysisHistory]:
    """En yeni önce. search: ürün adı veya sorguda geçen metin (büyük/küçük harf duyarsız)."""
    stmt = (
        select(AnalysisHistory)
        .where(AnalysisHistory.user_id == user_id)
        .order_by(AnalysisHistory.created_at.desc(), AnalysisHistory.id.desc())
    )
    rows = list(db.exec(stmt).all())
    needle = (search or "").strip().lower()
    if not needle:
        return rows
    return [
        r for r in rows
        if needle in (r.product_name or "").lower() or needle in (r.query or "").lower()
    ]


def get_entry(db: Session, user_id: int, entry_id: int) -> AnalysisHistory | None:
    entry = db.get(AnalysisHistory, entry_id)
    if not entry or entry.user_id != user_id:
        return None
    return entry


def delete_entry(db: Session, user_id: int, entry_id: int) -> bool:
    entry = get_entry(db, user_id, entry_id)
    if entry is None:
        return False
    db.delete(entry)
    db.commit()
    return True


def get_profile(db: Session, user_id: int) -> Profile | None:
    return db.exec(select(Profile).where(Profile.user_id == user_id)).first()


def load_health_concerns(user_id: int) -> list[str]:
    """Oturum başında profil okunur; hata loglanır, kullanıcıya yansımaz."""
    try:
        with session_scope() as db:
            profile = get_profile(db, user_id)
            return list(profile.health_concerns or []) if profile else []
    except Exception as e:
        logger.warning("Profile read failed for user %s: %s", user_id, e)
        return []


def save_profile(db: Session, user_id: int, display_name: str | None, health_concerns: list[str]) -> Profile:
    """İlk kayıtta satır oluşur, sonrakilerde güncellenir."""
    profile = get_profile(db, user_id)
    if profile is None:
        profile = Profile(user_id=user_id)
    else:
        profile.updated_at = datetime.now(timezone.utc)
    profile.display_name = display_name
    profile.health_concerns = list(health_concerns)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile
