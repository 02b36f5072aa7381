"""Health check endpoint."""

from fastapi import APIRouter

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "",
    summary="Health check",
    description="Check the health status of the API service.",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "service": "media-autowriter",
                    }
                }
            },
        }
    },
)
async def health_check() -> dict:
    """
    Health check endpoint for load balancers and uptime monitors.

    Example:
        ```bash
        curl http://localhost:8000/api/v1/health
        ```
    """
    return {
        "status": "healthy",
        "service": "media-autowriter",
    }
