"""Alembic ortamı: hedef şema app.models'taki SQLModel tabloları (user, profiles, analysis_history)."""
import sys
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

sys.path.append(str(Path(__file__).resolve().parents[1]))

import app.models  # noqa: E402,F401
from app.core.database import DATABASE_URL  # noqa: E402

config = context.config
# alembic.ini'de url boşsa .env'deki DATABASE_URL
url = config.get_main_option("sqlalchemy.url") or DATABASE_URL
config.set_main_option("sqlalchemy.url", url)

if config.config_file_name is not None:
    from logging.config import fileConfig

    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata
# SQLite ALTER TABLE kısıtları yüzünden değişiklikler batch modunda üretilir
options = {"target_metadata": target_metadata, "compare_type": True, "render_as_batch": True}

if context.is_offline_mode():
    context.configure(url=url, literal_binds=True, **options)
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **options)
        with context.begin_transaction():
            context.run_migrations()
