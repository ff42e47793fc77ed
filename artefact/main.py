from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from artefact.core.config import Settings, settings as default_settings
from artefact.core.errors import register_exception_handlers
from artefact.core.logging import configure_logging
from artefact.core.security import PasswordHasher
from artefact.db.sessions import Database
from artefact.routes import auth, categories, dashboard, team, urls, workspace
from artefact.services.email_service import EmailService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """Build the application around explicitly constructed services."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    database = database or Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    email_service = email_service or EmailService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect()
        email_service.connect()
        logger.info("%s v%s starting (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
        try:
            yield
        finally:
            email_service.close()
            database.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Team bookmark workspaces with session authentication",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.email_service = email_service
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

    # CORS configuration; credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routers
    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(urls.router)
    app.include_router(team.router)
    app.include_router(workspace.router)
    app.include_router(dashboard.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("artefact.main:app", host="0.0.0.0", port=8000, reload=default_settings.ENVIRONMENT != "production")
