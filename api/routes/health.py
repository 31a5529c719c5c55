from fastapi import APIRouter

from models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", version=API_VERSION)
