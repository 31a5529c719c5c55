import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api.middleware.cors import setup_cors
from api.routes import health, chat
from api.routes.health import API_VERSION
from api.dependencies import get_config, get_chat_service


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    configure_logging(get_config().log_level)
    yield
    # Shutdown
    if get_chat_service.cache_info().currsize:
        await get_chat_service().llm.aclose()


app = FastAPI(
    title="Portfolio Agent API",
    description="Streaming knowledge-base agent",
    version=API_VERSION,
    redoc_url="/redoc",
    lifespan=lifespan
)

setup_cors(app)

app.include_router(health.router)
app.include_router(chat.router)


@app.get("/", tags=["root"])
async def root():
    return JSONResponse(
        content={
            "name": "Portfolio Agent API",
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "chat_stream": "POST /api/agent/chat/stream",
            }
        }
    )


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app,
                host="0.0.0.0",
                port=port,
                timeout_keep_alive=300,
                log_level="info",
                access_log=True
            )
