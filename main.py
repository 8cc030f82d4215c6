from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config import LOG_LEVEL, Settings
from infrastructure.auth import AuthClient
from infrastructure.database import TaskStore
from interfaces.api import router as api_router
from interfaces.pages import router as pages_router
from interfaces.sessions import SessionRegistry
import httpx
import uvicorn
import logging

# --- Basic Setup ---
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Builds the app. `transport` replaces the network for every outbound store/auth call."""
    settings = settings or Settings()

    app = FastAPI(title="TaskFlow")
    app.state.settings = settings
    app.state.auth = AuthClient(
        settings.supabase_url,
        settings.supabase_anon_key,
        settings.supabase_jwt_secret,
        timeout=settings.http_timeout,
        role_cache_ttl=settings.role_cache_ttl,
        transport=transport,
    )

    def store_factory(access_token: str) -> TaskStore:
        return TaskStore(
            settings.supabase_url,
            settings.supabase_anon_key,
            access_token=access_token,
            timeout=settings.http_timeout,
            transport=transport,
        )

    app.state.sessions = SessionRegistry(store_factory, idle_ttl=settings.session_ttl)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    app.include_router(pages_router)

    logger.info(f"SUPABASE_URL: {settings.supabase_url}")
    if not settings.supabase_jwt_secret:
        logger.warning("SUPABASE_JWT_SECRET is not set, every token will be rejected")
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
