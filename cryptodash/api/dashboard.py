# cryptodash/api/dashboard.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import JSONResponse

from cryptodash.schemas.assets import AssetSummary
from cryptodash.schemas.view import DashboardView, SearchRequest
from cryptodash.services.controller import DashboardController
from cryptodash.services.view import build_dashboard_view


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _error_response(
    *,
    code: str,
    message: str,
    status_code: int = 400,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=payload)


def get_controller(request: Request) -> DashboardController:
    return request.app.state.controller


@router.get("", response_model=DashboardView)
async def get_dashboard(controller: DashboardController = Depends(get_controller)):
    return build_dashboard_view(controller.state)


@router.get("/assets", response_model=list[AssetSummary])
async def list_assets(
    q: str | None = Query(None, max_length=200, description="Filter term; defaults to the current search"),
    controller: DashboardController = Depends(get_controller),
):
    return controller.visible_assets(q)


@router.post("/refresh", response_model=DashboardView)
async def refresh_dashboard(controller: DashboardController = Depends(get_controller)):
    await controller.refresh()
    return build_dashboard_view(controller.state)


@router.post("/retry", response_model=DashboardView)
async def retry_dashboard(controller: DashboardController = Depends(get_controller)):
    await controller.retry()
    return build_dashboard_view(controller.state)


@router.put("/search", response_model=DashboardView)
async def set_search(body: SearchRequest, controller: DashboardController = Depends(get_controller)):
    controller.set_search(body.term)
    return build_dashboard_view(controller.state)


@router.post("/assets/{asset_id}/select", response_model=DashboardView)
async def select_asset(
    asset_id: str = Path(..., min_length=1, max_length=200, pattern=r"^[A-Za-z0-9._-]+$"),
    controller: DashboardController = Depends(get_controller),
):
    known = {a.id for a in controller.state.assets}
    if known and asset_id not in known:
        return _error_response(
            code="unknown_asset",
            message=f"Asset '{asset_id}' is not in the current market list",
            status_code=404,
            details={"asset_id": asset_id, "known_assets": len(known)},
        )

    await controller.fetch_detail(asset_id)
    return build_dashboard_view(controller.state)


@router.delete("/selection", response_model=DashboardView)
async def clear_selection(controller: DashboardController = Depends(get_controller)):
    controller.deselect()
    return build_dashboard_view(controller.state)
