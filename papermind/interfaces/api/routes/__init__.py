from fastapi import APIRouter

from .documents import router as documents_router
from .reminders import router as reminders_router

router = APIRouter()
router.include_router(documents_router)
router.include_router(reminders_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"status": "healthy", "message": "PaperMind API is running"}
