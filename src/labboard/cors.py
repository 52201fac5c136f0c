from __future__ import annotations

from fastapi import Request

from labboard.config import CORS_ALLOW_ORIGIN

CORS_ALLOW_METHODS = "GET,POST,OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"


def cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


async def cors_middleware(request: Request, call_next):
    """每个路由响应（含 400/404/405）都带宽松 CORS 头；预检由路由自己回 204。未捕获异常的 500 不经过这里。"""
    response = await call_next(request)
    for name, value in cors_headers().items():
        response.headers[name] = value
    return response
