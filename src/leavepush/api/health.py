import time

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("")
async def health(request: Request) -> dict:
    """Liveness plus table sizes."""
    state = request.app.state
    registry = state.registry
    return {
        "success": True,
        "status": "running",
        "uptime": round(time.monotonic() - state.started_at, 3),
        "stats": {
            "totalSubscriptions": registry.count(),
            "totalUsers": registry.count_users(),
        },
    }
