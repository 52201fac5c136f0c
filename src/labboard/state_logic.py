from __future__ import annotations

from typing import Any

from labboard.config import BENCH_NAMES, DEFAULT_STAFF
from labboard.field_checks import (
    check_list,
    check_str,
    check_timestamp_ms,
    or_default,
)
from labboard.layout_logic import normalize_layout
from labboard.schema import BENCH_SENTINEL, KANBAN_COLUMNS, default_document, now_ms


def merge_with_defaults(incoming: Any, now: int | None = None) -> dict[str, Any]:
    """
    任意输入 → 合法的完整文档（只以默认值为底，不参考之前存储的内容）。
    - None：原样返回默认文档（含欢迎 notice）
    - 其他非 dict：按空对象处理（notice 为 ""）
    - 未知字段、未知 bench 名一律丢弃；字段类型不对回退默认
    幂等：merge_with_defaults(merge_with_defaults(x)) == merge_with_defaults(x)。不 raise。
    now 为毫秒时间戳，仅在 lastCorrectionDate 缺失/非法时使用。
    """
    if incoming is None:
        return default_document(now)
    if not isinstance(incoming, dict):
        incoming = {}

    benches_raw = incoming.get("benches")
    if not isinstance(benches_raw, dict):
        benches_raw = {}
    benches = {name: or_default(check_str(benches_raw.get(name)), BENCH_SENTINEL) for name in BENCH_NAMES}

    kanban_raw = incoming.get("kanban")
    if not isinstance(kanban_raw, dict):
        kanban_raw = {}
    kanban = {col: or_default(check_list(kanban_raw.get(col)), []) for col in KANBAN_COLUMNS}

    last_correction = or_default(check_timestamp_ms(incoming.get("lastCorrectionDate")), None)
    if last_correction is None:
        last_correction = now_ms() if now is None else now

    return {
        "notice": or_default(check_str(incoming.get("notice")), ""),
        "staff": or_default(check_list(incoming.get("staff")), list(DEFAULT_STAFF)),
        "benches": benches,
        "kanban": kanban,
        "lastCorrectionDate": last_correction,
        "layout": normalize_layout(incoming.get("layout")),
    }
