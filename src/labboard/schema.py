"""
看板文档的唯一 schema 定义点：bench 名单、kanban 列、layout 字段范围与各字段默认值。
normalizer / merger 只读此处，不 hardcode 名单或数值。
"""
from __future__ import annotations

import time
from typing import Any

from labboard.config import BENCH_NAMES, DEFAULT_STAFF

BENCH_SENTINEL = "-- Select --"

KANBAN_COLUMNS = ("list-todo", "list-progress", "list-done")

DEFAULT_NOTICE = "<div style='text-align:center;'>Welcome to <b>Lab Dashboard</b></div>"

# layout 字段：(name, default, min, max)，闭区间
LAYOUT_FIELDS: tuple[tuple[str, float, float, float], ...] = (
    ("noticePercent", 15.0, 5.0, 60.0),
    ("rotationPercent", 20.0, 5.0, 60.0),
)
# 占屏字段（notice + rotation）之和上限；超出则两者一起回退默认
LAYOUT_AREA_FIELDS = ("noticePercent", "rotationPercent")
LAYOUT_AREA_CEILING = 90.0


def now_ms() -> int:
    return int(time.time() * 1000)


def default_layout() -> dict[str, float]:
    return {name: default for name, default, _lo, _hi in LAYOUT_FIELDS}


def default_benches() -> dict[str, str]:
    return {name: BENCH_SENTINEL for name in BENCH_NAMES}


def default_kanban() -> dict[str, list[Any]]:
    return {col: [] for col in KANBAN_COLUMNS}


def default_document(now: int | None = None) -> dict[str, Any]:
    """每次返回新对象，调用方可随意修改。lastCorrectionDate 缺省取当前毫秒时间戳。"""
    return {
        "notice": DEFAULT_NOTICE,
        "staff": list(DEFAULT_STAFF),
        "benches": default_benches(),
        "kanban": default_kanban(),
        "lastCorrectionDate": now_ms() if now is None else now,
        "layout": default_layout(),
    }
