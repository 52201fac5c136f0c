# src/labboard/state_store.py
"""
看板状态仓库：blob store 上唯一固定 key 的读写 + 归一。
不缓存文档，每次调用都重新读存储；写入为整份替换（默认值 + 本次输入），无 patch、无 CAS。
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any

from labboard.blobs import BlobStore, validate_blob_name
from labboard.state_logic import merge_with_defaults

logger = logging.getLogger(__name__)


def serialize_document(doc: dict[str, Any]) -> bytes:
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def loads_strict_json(raw: bytes) -> Any:
    """UTF-8 JSON 解析；拒绝 NaN / Infinity 常量以及溢出成 inf 的数字（如 1e400），否则响应序列化会失败。"""
    return json.loads(raw.decode("utf-8"), parse_constant=_reject_constant, parse_float=_finite_float)


def decode_stored_document(raw: bytes | None) -> Any:
    """存储中的 bytes → JSON 值；缺失或损坏（非 UTF-8 / 非 JSON）返回 None 并记 WARNING。"""
    if raw is None:
        return None
    try:
        return loads_strict_json(raw)
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning("stored dashboard state is not valid JSON, treating as absent: %s", e)
        return None


class DashboardStateStore:
    def __init__(self, blob_store: BlobStore, key: str) -> None:
        self.blob_store = blob_store
        self.key = validate_blob_name("key", key)

    def fetch_canonical(self, now: int | None = None) -> dict[str, Any]:
        """读 → 归一 → 返回。从不写存储（首次读只在内存里物化默认文档）。"""
        existing = decode_stored_document(self.blob_store.get(self.key))
        return merge_with_defaults(existing, now=now)

    def replace_canonical(self, incoming: Any, now: int | None = None) -> dict[str, Any]:
        """以默认值 + incoming 算出整份文档并写入；客户端省略的字段回到默认，而不是旧值。"""
        state = merge_with_defaults(incoming, now=now)
        body = serialize_document(state)
        self.blob_store.set(self.key, body)
        logger.info("dashboard state replaced key=%s bytes=%s", self.key, len(body))
        return state
