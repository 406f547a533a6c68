from fastapi import APIRouter

router = APIRouter()


@router.get("", summary="Liveness probe")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
