import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn nereden çalışırsa çalışsın .env proje kökünden yüklensin
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.api.auth import router as auth_router
from app.api.chat import previews_router, router as chat_router
from app.api.dashboard import router as dashboard_router
from app.api.functions import CORS_HEADERS, router as functions_router
from app.api.history import router as history_router
from app.api.profile import router as profile_router
from app.core.config import is_gateway_configured, settings
from app.core.database import init_db
from app.core.rate_limit import limiter
from app.logging import setup_logging

setup_logging(settings.log_level)
log = logging.getLogger("copilot")

FUNCTIONS_PREFIX = "/functions/"
ALLOWED_HEADERS = [h.strip() for h in CORS_HEADERS["Access-Control-Allow-Headers"].split(",")]


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info(
        "AI_GATEWAY_API_KEY loaded: %s, analysis_mode=%s",
        "yes" if is_gateway_configured() else "NO (.env dosyasına AI_GATEWAY_API_KEY=... ekleyin)",
        settings.analysis_mode,
    )
    yield


app = FastAPI(
    title="Ingredient Co-Pilot API",
    description="Food label analysis chat API",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    # Edge fonksiyonu hata yanıtlarında da CORS başlıklarını taşır
    headers = CORS_HEADERS if request.url.path.startswith(FUNCTIONS_PREFIX) else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("rate_limit: path=%s detail=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests. Please wait a minute.")


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning(
        "Request validation error (422): path=%s method=%s detail=%s",
        request.url.path,
        request.method,
        errs,
    )
    first = errs[0] if errs else {}
    user_msg = first.get("msg") or "Invalid request."
    # Edge fonksiyonu gövde hatalarını da {"error"} + 500 + CORS ile döner
    if request.url.path.startswith(FUNCTIONS_PREFIX):
        return _error_response(request, 500, user_msg)
    rid = getattr(request.state, "request_id", None)
    body = {"error": user_msg, "status_code": 422, "detail": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errs]}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=422, content=body)


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    path = (request.url.path or "").strip()
    if path.startswith(FUNCTIONS_PREFIX) or path.startswith("/chat"):
        user_msg = "Analysis failed"
    else:
        user_msg = "Unexpected server error."
    return _error_response(request, 500, user_msg)


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


# Bearer token kullanılıyor, cookie yok: allow_credentials kapalı ki origin "*" kalsın
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=ALLOWED_HEADERS,
)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(history_router)
app.include_router(dashboard_router)
app.include_router(chat_router)
app.include_router(previews_router)
app.include_router(functions_router)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "ai_configured": is_gateway_configured(),
        "analysis_mode": settings.analysis_mode,
    }


@app.get("/")
def index():
    return {"status": "ready", "service": "ingredient-copilot"}
