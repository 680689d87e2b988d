from typing import Any, Dict

from fastapi import APIRouter

from .. import SERVER_NAME, __version__

router = APIRouter()


def health_payload() -> Dict[str, Any]:
    """Liveness only; backends are not contacted."""
    return {"ok": True, "status": "ok", "server": SERVER_NAME, "version": __version__}


@router.get("/health", tags=["Monitoring"], summary="Liveness probe", include_in_schema=False)
@router.get("/healthz", tags=["Monitoring"], summary="Liveness probe (Kubernetes path)", include_in_schema=False)
async def health_check() -> Dict[str, Any]:
    return health_payload()
