import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import get_config


logger = logging.getLogger(__name__)


def setup_cors(app: FastAPI) -> None:
    config = get_config()

    if not config.allowed_origins:
        logger.warning("No ALLOWED_ORIGINS configured. CORS will block all requests.")
        allowed_origins = []
    else:
        allowed_origins = config.allowed_origins
        logger.info(f"CORS enabled for origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
