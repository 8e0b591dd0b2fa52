"""
Log yapılandırması: stdout'a tek satırlık kayıtlar.
Seviye LOG_LEVEL ile ayarlanır; istek satırları main.py'deki middleware'den gelir.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
APP_LOGGERS = ("copilot", "app")
# Her gateway çağrısında istek/yanıt satırı basan kütüphaneler
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "PIL", "multipart")


def setup_logging(level: int | str = logging.INFO, format_string: str = LOG_FORMAT) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=format_string, stream=sys.stdout, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", *APP_LOGGERS):
        logging.getLogger(name).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
