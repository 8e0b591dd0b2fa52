from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models import User
from app.schemas.profile import ConcernOption, ProfileResponse, ProfileUpdate
from app.services.concerns import CATEGORY_LABELS, concerns_by_category
from app.services.persistence import get_profile, save_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def read_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Profil henüz kaydedilmediyse boş profil döner."""
    profile = get_profile(db, user.id or 0)
    if profile is None:
        return ProfileResponse(user_id=user.id or 0)
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        health_concerns=list(profile.health_concerns or []),
    )


@router.put("", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = save_profile(db, user.id or 0, body.display_name, body.health_concerns)
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        health_concerns=list(profile.health_concerns or []),
    )


@router.get("/concerns", response_model=list[ConcernOption])
def concern_catalog():
    """Profil sayfasındaki seçenekler, kategori sırasıyla."""
    return [
        ConcernOption(**c._asdict(), category_label=CATEGORY_LABELS[category])
        for category, concerns in concerns_by_category().items()
        for c in concerns
    ]
