from fastapi import APIRouter

router = APIRouter()


@router.get("/status/ping", summary="Ping the server", tags=["status"])
async def ping() -> str:
    return "pong"
