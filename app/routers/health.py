from fastapi import APIRouter
from app.core.runtime import uptime_seconds, utc_timestamp

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
async def health():
    return {"status": "ok", "timestamp": utc_timestamp(), "uptime": uptime_seconds()}
