from fastapi import APIRouter, HTTPException, Request
from app.utils.logger import logger

router = APIRouter()

@router.get("/live")
async def liveness_check():
    logger.debug("Liveness check passed")
    return {"status": "alive"}

@router.get("/ready")
async def readiness_check(request: Request):
    registry = getattr(request.app.state, "tenant_registry", None)
    if registry is None:
        error = getattr(request.app.state, "config_error", None)
        logger.error(f"Readiness failed: {error.message if error else 'tenant registry not loaded'}")
        raise HTTPException(status_code=503, detail="Tenant configuration unavailable")

    logger.debug(f"Tenant registry ready with {len(registry)} account(s)")
    return {"status": "ready", "accounts": len(registry)}
