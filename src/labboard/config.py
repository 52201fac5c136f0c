from __future__ import annotations

import json
import os
from pathlib import Path

_ENV_LOADED = False


def _load_env_file() -> None:
    """从仓库根 .env（或 LABBOARD_ENV_FILE）加载环境变量；仅 setdefault，不覆盖已有。只执行一次。"""
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True
    env_path = os.environ.get("LABBOARD_ENV_FILE")
    if env_path:
        path = Path(env_path)
    else:
        repo_root = Path(__file__).resolve().parents[2]
        path = repo_root / ".env"
    try:
        raw = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[7:].strip()
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        if key.startswith("#"):
            continue
        if value and len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        if key:
            os.environ.setdefault(key, value)


def _env_int(name: str, default: int) -> int:
    """读取环境变量并转为 int；None/空字符串/转换失败时返回 default。"""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    """接受 "1/true/yes/on" 为 True"""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.lower().strip() in ("1", "true", "yes", "on")


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


_load_env_file()

# import 阶段不 raise；配置错误时回退默认并写入 _STARTUP_WARNINGS，由 lifespan 统一打印。
_STARTUP_WARNINGS: list[str] = []

_DEFAULT_BENCH_NAMES = ("Hema", "Cobas", "Cyto", "Immulite", "RIA", "Recei", "Libero")
_DEFAULT_STAFF = ("Alice", "Bob", "Charlie", "Dave", "Eve")


def try_load_name_list(env_name: str, default: tuple[str, ...]) -> tuple[tuple[str, ...], str | None]:
    """
    读取 JSON 字符串数组形式的名单（bench 列表 / 默认 staff）。
    不在本函数内 raise；非法时回退默认并返回 warning。
    返回：(names, warning_msg_or_none)
    """
    raw = os.getenv(env_name)
    if not raw or not raw.strip():
        return default, None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return default, f"{env_name} JSON 解析失败（{e!s}），已回退默认名单。"
    if not isinstance(data, list) or not data:
        return default, f"{env_name} 必须为非空 JSON 字符串数组，已回退默认名单。"
    names: list[str] = []
    for item in data:
        if not isinstance(item, str) or not item.strip() or item != item.strip():
            return default, f"{env_name} 含非法项 {item!r}（须为无前后空白的非空字符串），已回退默认名单。"
        if item in names:
            return default, f"{env_name} 含重复项 {item!r}，已回退默认名单。"
        names.append(item)
    return tuple(names), None


def _load_names(env_name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    names, warning = try_load_name_list(env_name, default)
    if warning:
        _STARTUP_WARNINGS.append(warning)
    return names


# --- 持久化：单一 namespace + 单一 key ---
STORE_NAME = _env_str("LABBOARD_STORE_NAME", "lab-dashboard")
STATE_KEY = _env_str("LABBOARD_STATE_KEY", "state")

_ALLOWED_BLOB_BACKENDS = {"file", "memory"}
_raw_backend = _env_str("LABBOARD_BLOB_BACKEND", "file").lower()
if _raw_backend not in _ALLOWED_BLOB_BACKENDS:
    _STARTUP_WARNINGS.append(f"LABBOARD_BLOB_BACKEND={_raw_backend!r} 不支持（file|memory），已回退 file。")
    _raw_backend = "file"
BLOB_BACKEND = _raw_backend
BLOB_DIR = Path(_env_str("LABBOARD_BLOB_DIR", str(Path(__file__).resolve().parents[2] / "var" / "blobs")))
# file 后端每次 set 后是否 fsync（关掉可在慢盘上提速，断电可能丢最后一次写）
BLOB_FSYNC = _env_bool("LABBOARD_BLOB_FSYNC", True)

# --- HTTP ---
STATE_PATH = _env_str("LABBOARD_STATE_PATH", "/api/dashboard-state")
if not STATE_PATH.startswith("/"):
    _STARTUP_WARNINGS.append(f"LABBOARD_STATE_PATH={STATE_PATH!r} 须以 / 开头，已回退 /api/dashboard-state。")
    STATE_PATH = "/api/dashboard-state"
CORS_ALLOW_ORIGIN = _env_str("LABBOARD_CORS_ALLOW_ORIGIN", "*")
# 请求体上限（字节）；超出回 413 Payload Too Large
_max_body = _env_int("LABBOARD_MAX_BODY_BYTES", 1024 * 1024)
MAX_BODY_BYTES = _max_body if _max_body > 0 else 1024 * 1024

# --- 文档 schema 可配置部分（其余常量见 schema.py）---
BENCH_NAMES = _load_names("LABBOARD_BENCHES_JSON", _DEFAULT_BENCH_NAMES)
DEFAULT_STAFF = _load_names("LABBOARD_STAFF_JSON", _DEFAULT_STAFF)
