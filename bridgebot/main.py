import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import health, quotes, telegram_webhook
from .config import settings
from .core.bridge.service import build_bridge_service
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    service = build_bridge_service(settings)
    app.state.bridge_service = service
    app.state.telegram_app = None

    if settings.has_telegram_token:
        from .telegram import build_application

        telegram_app = build_application(settings.telegram_bot_token, service)
        await telegram_app.initialize()
        app.state.telegram_app = telegram_app
        logger.info("Telegram webhook handler ready")
    else:
        logger.warning("BOT_TOKEN not set; /telegram/webhook will answer 503")

    try:
        yield
    finally:
        if app.state.telegram_app is not None:
            await app.state.telegram_app.shutdown()


# Create FastAPI app
app = FastAPI(
    title="Bridge Quote Bot",
    description="Cross-chain bridge quote comparison for chat",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(quotes.router, tags=["Quotes"])
app.include_router(telegram_webhook.router, tags=["Telegram"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Bridge Quote Bot",
        "version": __version__,
        "description": "Cross-chain bridge quote comparison for chat",
        "docs": "/docs",
        "health": "/healthz",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bridgebot.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
