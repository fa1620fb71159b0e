"""
FastAPI Application Entry Point

Integrates:
  - Telegram webhook handler
  - Health checks
  - Startup: config check, first speech token, webhook registration
  - Middleware for logging & error handling

Run: python main.py   (serves HTTPS with BOT_CERT_PATH / BOT_KEY_PATH)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webhook.telegram import router as telegram_router, get_relay_handler, set_relay_handler
from config import Config

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.

    Any exception raised before ``yield`` aborts startup, so the server
    never accepts traffic without config and a speech token.
    """
    from infra.bootstrap import RelayBootstrap

    # Startup
    Config.require()
    bootstrap = RelayBootstrap.get_instance()
    logger.info(f"Voice relay starting up... {bootstrap!r}")
    try:
        handler = await bootstrap.start()
    except Exception:
        logger.error("Startup failed, releasing clients")
        await bootstrap.close()
        RelayBootstrap.reset()
        raise
    set_relay_handler(handler)
    logger.info(f"Serving webhook {Config.BOT_WEBHOOK_URL} on port {Config.BOT_SERVER_PORT}")

    yield

    # Shutdown
    logger.info("Voice relay shutting down...")
    set_relay_handler(None)
    await bootstrap.close()
    RelayBootstrap.reset()


# Create FastAPI app
app = FastAPI(
    title="Voice Relay Bot",
    description="Telegram webhook that answers text with synthesized speech",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(telegram_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check: config complete and handler installed."""
    missing = Config.missing()
    if missing:
        return {"status": "not_ready", "reason": f"missing config: {', '.join(missing)}"}
    if get_relay_handler() is None:
        return {"status": "not_ready", "reason": "relay handler not initialized"}
    return {"status": "ready"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Voice Relay Bot",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "telegram_webhook": "POST /webhook",
            "telegram_health": "GET /webhook/health",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(Config.BOT_SERVER_PORT or "8443"),
        ssl_certfile=Config.BOT_CERT_PATH or None,
        ssl_keyfile=Config.BOT_KEY_PATH or None,
    )
