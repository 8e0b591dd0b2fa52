from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models import User
from app.schemas import DashboardStats
from app.services.dashboard import aggregate_history
from app.services.persistence import get_profile, list_history

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardStats)
def dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Her istekte geçmişin tamamı taranır; birikimli/önbellekli hesap yok."""
    profile = get_profile(db, user.id or 0)
    concerns = list(profile.health_concerns or []) if profile else []
    rows = list_history(db, user.id or 0)
    return aggregate_history([r.analysis_result for r in rows], concerns)
