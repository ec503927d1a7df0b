from fastapi import FastAPI

from app.api.routes import router as sync_router
from app.config.settings import Settings
from app.logger import set_log_level


def create_app() -> FastAPI:
    settings = Settings()
    set_log_level(settings.log_level)
    app = FastAPI(title=settings.app_name)
    app.include_router(sync_router)
    return app


app = create_app()
