"""Parola hash'i (bcrypt) ve oturum token'ı (JWT, HS256)."""
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from .config import settings

ALGORITHM = "HS256"
# bcrypt 72 bayttan sonrasını yok sayar; uzun parolalarda hata vermesin diye kesilir
MAX_BCRYPT_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_BCRYPT_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Bozuk hash kaydı
        return False


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)
    claims = {"sub": str(user_id), "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def token_user_id(token: str) -> int | None:
    """Geçerli token'dan kullanıcı id'si; imza/süre/biçim hatasında None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    return int(sub) if isinstance(sub, str) and sub.isdigit() else None
