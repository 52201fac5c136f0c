"""
逐字段校验：纯函数，返回 Valid(value) 或 INVALID，由 merger / layout normalizer 消费。
任何输入都不 raise；回退默认值的决定留给调用方（or_default）。
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

# 与 JS parseFloat 一致：只认前导数字部分（"30px" -> 30）
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


class _Invalid:
    __slots__ = ()

    def __repr__(self) -> str:
        return "INVALID"


INVALID = _Invalid()

CheckResult = Union[Valid[T], _Invalid]


def or_default(result: CheckResult[T], default: T) -> T:
    if isinstance(result, Valid):
        return result.value
    return default


def check_str(v: Any) -> CheckResult[str]:
    if isinstance(v, str):
        return Valid(v)
    return INVALID


def check_list(v: Any) -> CheckResult[list[Any]]:
    """list 时返回浅拷贝，避免输出与输入共享容器。"""
    if isinstance(v, list):
        return Valid(list(v))
    return INVALID


def check_float(v: Any) -> CheckResult[float]:
    """数字或带数字前缀的字符串；bool、NaN、inf 一律 INVALID。"""
    if isinstance(v, bool):
        return INVALID
    if isinstance(v, (int, float)):
        try:
            f = float(v)
        except OverflowError:
            return INVALID
    elif isinstance(v, str):
        m = _FLOAT_PREFIX_RE.match(v)
        if m is None:
            return INVALID
        try:
            f = float(m.group(1))
        except ValueError:
            return INVALID
    else:
        return INVALID
    if not math.isfinite(f):
        return INVALID
    return Valid(f)


def check_timestamp_ms(v: Any) -> CheckResult[int]:
    """正的有限数字（毫秒时间戳），截断为 int；0、负数、字符串、bool 均 INVALID。"""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return INVALID
    if isinstance(v, float) and not math.isfinite(v):
        return INVALID
    ts = int(v)
    if ts <= 0:
        return INVALID
    return Valid(ts)
