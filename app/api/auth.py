import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlmodel import Session, select

from app.core.database import get_db
from app.core.rate_limit import AUTH_LIMIT, limiter
from app.core.security import create_access_token, hash_password, verify_password
from app.api.deps import get_current_user
from app.models import User
from app.schemas import Token, UserCreate, UserResponse
from app.services.persistence import get_profile, save_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(db: Session, user: User) -> UserResponse:
    profile = get_profile(db, user.id or 0)
    return UserResponse(
        id=user.id or 0,
        email=user.email,
        display_name=profile.display_name if profile else None,
    )


@router.post("/register", response_model=UserResponse)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    db: Session = Depends(get_db),
):
    form = await request.form()
    try:
        body = UserCreate(
            email=(form.get("email") or "").strip(),
            password=form.get("password") or "",
            display_name=(form.get("display_name") or "").strip(),
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][-1]) if first.get("loc") else ""
        if field == "email":
            raise HTTPException(status_code=422, detail="Enter a valid email address.")
        raise HTTPException(status_code=422, detail="Password must be at least 6 characters.")
    if db.exec(select(User).where(User.email == body.email)).first():
        raise HTTPException(status_code=400, detail="This email is already registered.")
    user = User(email=body.email, hashed_password=hash_password(body.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    if body.display_name:
        try:
            save_profile(db, user.id or 0, body.display_name, [])
        except Exception as e:
            # Profil sonradan /profile ile kaydedilebilir
            logger.warning("Initial profile write failed for user %s: %s", user.id, e)
    logger.info("register: user_id=%s", user.id)
    return _user_response(db, user)


@router.post("/login", response_model=Token)
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    db: Session = Depends(get_db),
):
    form = await request.form()
    email = (form.get("email") or "").strip()
    password = form.get("password") or ""
    if not email:
        raise HTTPException(status_code=422, detail="Enter your email.")
    if not password:
        raise HTTPException(status_code=422, detail="Enter your password.")
    user = db.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("failed_login: email=%s", email)
        raise HTTPException(status_code=401, detail="Incorrect email or password.")
    return Token(access_token=create_access_token(user.id or 0))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _user_response(db, user)
