"""
Script to recreate database with the current schema and demo data.

Borra TODAS las tablas. Solo para desarrollo.
"""
import logging

from cibercontrol.core.config import settings
from cibercontrol.core.database import SessionLocal, engine
from cibercontrol.models import Base
from cibercontrol.services.seed import seed_demo


logger = logging.getLogger(__name__)


def recreate_db():
    if settings.env == "prod":
        raise SystemExit("Refusing to recreate the database with ENV=prod")

    logger.info("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    logger.info("Creating tables...")
    Base.metadata.create_all(bind=engine)

    logger.info("Seeding demo data...")
    db = SessionLocal()
    try:
        seed_demo(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    logger.info("Database recreated: %s", engine.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    recreate_db()
