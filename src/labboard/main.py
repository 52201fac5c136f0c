# src/labboard/main.py
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from labboard.blobs import BlobStore, open_blob_store
from labboard.config import (
    _STARTUP_WARNINGS,
    BLOB_BACKEND,
    BLOB_DIR,
    BLOB_FSYNC,
    STATE_KEY,
    STORE_NAME,
)
from labboard.cors import cors_middleware
from labboard.routes.state import router as state_router
from labboard.state_store import DashboardStateStore

logger = logging.getLogger(__name__)


def _run_startup_warnings() -> None:
    """收集配置告警，统一以 WARN: 打印到 stderr（仅启动时一次）。"""
    for msg in _STARTUP_WARNINGS:
        print("WARN:", msg, file=sys.stderr)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    _run_startup_warnings()
    logger.info("blob store=%s namespace=%s key=%s", type(app.state.blob_store).__name__, STORE_NAME, STATE_KEY)
    yield


def create_app(blob_store: Optional[BlobStore] = None) -> FastAPI:
    """
    blob_store 显式注入（测试传 MemoryBlobStore）；缺省按 LABBOARD_BLOB_BACKEND 打开。
    进程内不持有文档副本，多 worker 共享 file 后端也安全（后写覆盖先写）。
    """
    if blob_store is None:
        blob_store = open_blob_store(BLOB_BACKEND, STORE_NAME, root=BLOB_DIR, fsync=BLOB_FSYNC)
    app = FastAPI(title="Lab Dashboard State", lifespan=_lifespan)
    app.state.blob_store = blob_store
    app.state.state_store = DashboardStateStore(blob_store, STATE_KEY)
    app.middleware("http")(cors_middleware)
    app.include_router(state_router)
    return app


app = create_app()
