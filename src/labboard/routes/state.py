from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from labboard.config import MAX_BODY_BYTES, STATE_PATH
from labboard.state_store import loads_strict_json

router = APIRouter()


class LayoutOut(BaseModel):
    noticePercent: float
    rotationPercent: float


class DashboardStateOut(BaseModel):
    notice: str
    staff: list[Any]
    benches: dict[str, str]
    kanban: dict[str, list[Any]]
    lastCorrectionDate: int
    layout: LayoutOut


class StateWriteOut(BaseModel):
    success: bool
    data: DashboardStateOut


@router.options(STATE_PATH, status_code=204)
def dashboard_state_options():
    """CORS 预检：空 body 204，CORS 头由 cors_middleware 统一加。"""
    return Response(status_code=204)


@router.get(STATE_PATH, response_model=DashboardStateOut)
def dashboard_state_get(request: Request, response: Response):
    """返回归一后的完整文档；存储为空时返回默认文档但不写回。"""
    state_store = request.app.state.state_store
    response.headers["Cache-Control"] = "no-store"
    return state_store.fetch_canonical()


@router.post(STATE_PATH, response_model=StateWriteOut)
async def dashboard_state_post(request: Request):
    """
    整份替换：body 非法 JSON → 400 {"error": "Invalid JSON"}，不进 merger、不碰存储。
    合法 → 以默认值 + body 归一后写入，回 {"success": true, "data": <document>}。
    """
    raw = await request.body()
    if len(raw) > MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content={"error": "Payload Too Large"})
    try:
        body = loads_strict_json(raw)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})
    state_store = request.app.state.state_store
    state = await run_in_threadpool(state_store.replace_canonical, body)
    return {"success": True, "data": state}
