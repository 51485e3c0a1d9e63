"""
Health check route - public.
"""
from fastapi import APIRouter

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
async def health_check():
    """
    Check system health status.

    Reports whether config loads and the data directory is usable.
    """
    health = {
        "status": "healthy",
        "service": "PhotoTools POS API",
        "version": "1.0.0",
        "components": {}
    }

    try:
        import config
        health["components"]["config"] = "ok"
    except Exception as e:
        health["components"]["config"] = f"error: {str(e)}"
        health["status"] = "degraded"
        return health

    try:
        from api.dependencies import get_store
        store = get_store()
        health["components"]["store"] = "ok"
        health["components"]["data_dir"] = str(store.data_dir)
    except Exception as e:
        health["components"]["store"] = f"error: {str(e)}"
        health["status"] = "degraded"

    health["components"]["sms"] = "enabled" if config.FEATURE_SMS_ENABLED else "disabled"
    return health
