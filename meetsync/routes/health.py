from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


async def check_store(store) -> dict[str, Any]:
    try:
        await store.ping()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    stores = request.app.state.stores
    components = {
        "presence": await check_store(stores.presence),
        "telemetry": await check_store(stores.telemetry),
        "lifecycle": await check_store(stores.lifecycle),
    }

    all_ok = all(v["ok"] for v in components.values())
    some_ok = any(v["ok"] for v in components.values())
    status = "ok" if all_ok else ("degraded" if some_ok else "down")

    return JSONResponse(
        {"status": status, "backend": stores.backend, "components": components},
        status_code=200 if all_ok else 503,
    )
