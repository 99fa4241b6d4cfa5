from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from correspondence.api.routes.auth import router as auth_router
from correspondence.api.routes.incoming import router as incoming_router
from correspondence.core.config import settings
from correspondence.core.logger import logger
from correspondence.db.init_db import init_db


def create_app(initialize_db: bool = True) -> FastAPI:
    app = FastAPI(title="Correspondence", version="0.1.0")

    # Flash messages and the browser login token live in the signed session cookie;
    # SameSite=Lax keeps it off cross-site form posts
    app.add_middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET, same_site="lax")

    app.include_router(auth_router)
    app.include_router(incoming_router)

    if initialize_db:
        @app.on_event("startup")
        def _startup() -> None:
            init_db()
            logger.info(f"{settings.app_name} started ({settings.app_env}, locale={settings.app_locale})")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
