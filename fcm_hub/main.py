from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import init_db, is_database_configured
from .errors import register_exception_handlers
from .limiter import limiter
from .logging import setup_logging, get_logger, RequestIdMiddleware
from .auth.router import router as auth_router
from .routes.employees import router as employees_router
from .routes.profile import router as profile_router
from .routes.projects import router as projects_router
from .routes.project_tasks import router as project_tasks_router
from .routes.billing import router as billing_router
from .routes.quotations import router as quotations_router
from .routes.quote_requests import router as quote_requests_router
from .routes.task_reminders import router as task_reminders_router


log = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(employees_router)
    app.include_router(profile_router)
    app.include_router(projects_router)
    app.include_router(project_tasks_router)
    app.include_router(billing_router)
    app.include_router(quotations_router)
    app.include_router(quote_requests_router)
    app.include_router(task_reminders_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "database": is_database_configured()}

    @app.on_event("startup")
    def _startup():
        if not is_database_configured():
            log.warning("database_not_configured", detail="DATABASE_URL unset, serving fallback data")
            return
        init_db()
        log.info("startup_complete", environment=settings.environment)

    return app


app = create_app()
