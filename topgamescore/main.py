import uvicorn
from fastapi import FastAPI

from topgamescore.api.routes.events import router as events_router
from topgamescore.api.routes.groups import router as groups_router
from topgamescore.api.routes.health import router as health_router
from topgamescore.api.routes.internal_plans import router as internal_plans_router
from topgamescore.api.routes.play import router as play_router
from topgamescore.core.config import get_settings
from topgamescore.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)

    app = FastAPI(
        title="TopGameScore API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(groups_router)
    app.include_router(play_router)
    app.include_router(events_router)
    app.include_router(internal_plans_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "topgamescore.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
