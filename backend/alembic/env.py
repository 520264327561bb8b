# backend/alembic/env.py
from logging.config import fileConfig
import os, sys
from alembic import context

# --- backend/ klasörünü PYTHONPATH'e ekle (pip install -e olmadan da çalışsın) ---
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

# Uygulamanın engine & metadata'sı: DSN tek yerden (.env) gelir
from maintrack.core.db import engine as app_engine, Base
from maintrack import models  # noqa: F401  (metadata dolsun)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
IS_SQLITE = app_engine.dialect.name == "sqlite"


def _configure_kwargs():
    # SQLite ALTER kısıtları için batch mod
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=False,
        render_as_batch=IS_SQLITE,
    )


def run_migrations_offline():
    """SQL script üret (bağlantı açmadan)."""
    # str(url) parolayı maskeler; offline çıktıda gerçek adres lazım
    url = app_engine.url.render_as_string(hide_password=False)
    context.configure(url=url, literal_binds=True, **_configure_kwargs())
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    with app_engine.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
