from fastapi import APIRouter, Request

from cos_uploads.config.settings import Settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status.

    The upload routes refuse to start without complete storage settings, so a
    running app only reports where uploads go and which credentials it uses.
    """
    settings: Settings = request.app.state.settings

    return {
        "status": "ok",
        "app_name": settings.app_name,
        "endpoint": settings.cos_endpoint,
        "bucket": settings.cos_bucket_name,
        "auth": "iam" if settings.cos_api_key_id or settings.cos_service_instance_id else "hmac",
    }
