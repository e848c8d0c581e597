import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cibercontrol.core.config import settings
from cibercontrol.core.errors import CiberControlError
from cibercontrol.routes.health import router as health_router
from cibercontrol.routes.pcs import router as pcs_router
from cibercontrol.routes.sessions import router as sessions_router
from cibercontrol.routes.consumptions import router as consumptions_router
from cibercontrol.routes.clients import router as clients_router
from cibercontrol.routes.products import router as products_router
from cibercontrol.routes.debits import router as debits_router
from cibercontrol.routes.accounting import router as accounting_router
from cibercontrol.routes.reports import router as reports_router
from cibercontrol.routes.status_history import router as status_history_router
from cibercontrol.core.database import SessionLocal, init_db
from cibercontrol.services.seed import seed_demo


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="CiberControl API", version="0.1.0")

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(CiberControlError)
    async def handle_domain_error(request: Request, exc: CiberControlError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(health_router, tags=["health"])
    app.include_router(pcs_router, prefix="/pcs", tags=["pcs"])
    app.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
    app.include_router(consumptions_router, prefix="/consumptions", tags=["consumptions"])
    app.include_router(clients_router, prefix="/clients", tags=["clients"])
    app.include_router(products_router, prefix="/products", tags=["products"])
    app.include_router(debits_router, prefix="/debits", tags=["debits"])
    app.include_router(accounting_router, prefix="/accounting", tags=["accounting"])
    app.include_router(reports_router, prefix="/reports", tags=["reports"])
    app.include_router(status_history_router, prefix="/status-history", tags=["status-history"])

    return app


app = create_app()

# Only seed in development or when explicitly requested
if settings.env == "dev" and settings.seed_demo:
    try:
        init_db()
        with SessionLocal() as db:
            seed_demo(db)
    except Exception:
        logger.exception("demo seed failed")
