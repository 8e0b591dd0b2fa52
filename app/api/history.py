from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models import AnalysisHistory, User
from app.schemas import HistoryDetail, HistoryItem
from app.services.dashboard import score_label
from app.services.persistence import delete_entry, get_entry, list_history

router = APIRouter(prefix="/history", tags=["history"])


def _item_fields(entry: AnalysisHistory) -> dict:
    score = (entry.analysis_result or {}).get("healthScore")
    if not isinstance(score, int):
        score = None
    return {
        "id": entry.id or 0,
        "product_name": entry.product_name,
        "query": entry.query,
        "health_score": score,
        "health_score_label": score_label(score),
        "created_at": entry.created_at.isoformat(),
    }


@router.get("", response_model=list[HistoryItem])
def history(
    q: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """En yeni önce; q ile ürün adı / sorgu içinde arama."""
    return [HistoryItem(**_item_fields(e)) for e in list_history(db, user.id or 0, q)]


@router.get("/{entry_id}", response_model=HistoryDetail)
def history_detail(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entry = get_entry(db, user.id or 0, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found.")
    return HistoryDetail(**_item_fields(entry), analysis_result=entry.analysis_result)


@router.delete("/{entry_id}")
def delete_history_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not delete_entry(db, user.id or 0, entry_id):
        raise HTTPException(status_code=404, detail="Entry not found.")
    return {"message": "Entry deleted"}
