"""Welcome and health check endpoints"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from taskboard.api.responses import success
from taskboard.application import Application
from taskboard.dependencies import get_application

router = APIRouter(tags=["health"])


@router.get("/")
def welcome(application: Application = Depends(get_application)):
    config = application.config
    return success(f"Welcome to the {config.APP_NAME} API", {"version": config.APP_VERSION})


@router.get("/health")
async def health_check(application: Application = Depends(get_application)):
    """Aggregate health of every running service"""
    report = await application.health_status()
    code = status.HTTP_200_OK if report["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=report)
