from __future__ import annotations

from typing import Any

from labboard.field_checks import INVALID, check_float
from labboard.schema import LAYOUT_AREA_CEILING, LAYOUT_AREA_FIELDS, LAYOUT_FIELDS, default_layout


def normalize_layout(candidate: Any) -> dict[str, float]:
    """
    layout 归一：非 dict → 默认；逐字段解析为 float，不可解析/非有限 → 该字段默认，否则夹到闭区间。
    notice + rotation 之和超过 LAYOUT_AREA_CEILING 时两者一起回退默认（不按比例缩放）。
    未登记字段丢弃。不 raise。
    """
    out = default_layout()
    if not isinstance(candidate, dict):
        return out

    for name, default, lo, hi in LAYOUT_FIELDS:
        parsed = check_float(candidate.get(name))
        if parsed is INVALID:
            out[name] = default
            continue
        out[name] = min(max(parsed.value, lo), hi)

    if sum(out[name] for name in LAYOUT_AREA_FIELDS) > LAYOUT_AREA_CEILING:
        defaults = default_layout()
        for name in LAYOUT_AREA_FIELDS:
            out[name] = defaults[name]
    return out
