from fastapi import APIRouter

from jd2resume.core.config import settings

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the relay.")
async def health_check():
    return {
        "status": "healthy",
        "model": settings.gemini_model,
        "configured": bool(settings.gemini_api_key),
    }
