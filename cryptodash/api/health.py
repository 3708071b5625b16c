# cryptodash/api/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response

from cryptodash.utils.readiness import annotate_refresh_loop

router = APIRouter(tags=["health"])

APP_STARTED_AT = time.time()


def _now_meta() -> Dict[str, Any]:
    now_ts = time.time()
    now_dt = datetime.fromtimestamp(now_ts, tz=timezone.utc)
    return {
        "now_ts": now_ts,
        "now_unix": int(now_ts),
        "now_iso": now_dt.isoformat().replace("+00:00", "Z"),
        "uptime_s": int(now_ts - APP_STARTED_AT),
    }


def _check_refresh_loop(request: Request) -> Dict[str, Any]:
    handle = getattr(request.app.state, "refresh_loop", None)
    if handle is None:
        return {"ok": False, "running": False, "error": "refresh loop not started"}

    info, stalled = annotate_refresh_loop(handle.info())
    info["ok"] = bool(info.get("running")) and not stalled
    return info


def _check_market_data(request: Request) -> Dict[str, Any]:
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        return {"ok": False, "error": "controller unavailable"}

    state = controller.state
    return {
        "ok": state.error is None and bool(state.assets),
        "assets": len(state.assets),
        "loading": state.loading,
        "error": state.error,
        "last_updated_at": state.last_updated_at.isoformat() if state.last_updated_at else None,
    }


@router.get("/live")
async def live():
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request, response: Response):
    payload: Dict[str, Any] = {"status": "ok", **_now_meta()}
    checks = {
        "refresh_loop": _check_refresh_loop(request),
        "market_data": _check_market_data(request),
    }

    degraded_reasons = []
    loop_check = checks["refresh_loop"]
    if not loop_check.get("running"):
        degraded_reasons.append("refresh_loop_not_running")
    elif loop_check.get("stalled"):
        degraded_reasons.append("refresh_loop_stalled")

    if not checks["market_data"].get("ok"):
        degraded_reasons.append("market_data_unavailable")

    if degraded_reasons:
        payload["status"] = "degraded"
        payload["degraded"] = True
        payload["degraded_reasons"] = degraded_reasons
        response.status_code = 503
    else:
        payload["degraded"] = False
        payload["degraded_reasons"] = []

    payload["checks"] = checks
    return payload


@router.get("/health")
async def health(request: Request, response: Response):
    # Deep health == readiness here
    return await ready(request, response)
