import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cibercontrol.core.config import settings
from cibercontrol.models.base import Base


logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Create tables in dev/test without running Alembic
    if settings.env in {"dev", "test"}:
        import cibercontrol.models  # noqa: F401  registra todas las tablas

        Base.metadata.create_all(bind=engine)
        logger.info("schema ensured on %s", engine.url.render_as_string(hide_password=True))
