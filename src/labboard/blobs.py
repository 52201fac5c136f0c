"""
Key-value blob 存储：get(key) -> bytes | None，set(key, bytes)。
单次 get/set 原子；不提供 compare-and-swap，并发写者后写覆盖先写。
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from threading import Lock
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

BLOB_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...


def validate_blob_name(field: str, name: str) -> str:
    """namespace / key 只允许 [A-Za-z0-9_.-]，1~64 字符，且不能是 . 或 ..；否则 ValueError。"""
    if not isinstance(name, str) or not BLOB_NAME_RE.fullmatch(name) or name in (".", ".."):
        raise ValueError(f"invalid {field}: {name!r}")
    return name


class MemoryBlobStore:
    """进程内存态；重启即丢。测试与单进程 demo 用。"""

    def __init__(self, namespace: str = "default") -> None:
        self.namespace = validate_blob_name("namespace", namespace)
        self._blobs: dict[str, bytes] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[bytes]:
        validate_blob_name("key", key)
        with self._lock:
            return self._blobs.get(key)

    def set(self, key: str, value: bytes) -> None:
        validate_blob_name("key", key)
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("blob value must be bytes")
        with self._lock:
            self._blobs[key] = bytes(value)


class FileBlobStore:
    """
    每个 key 一个文件：<root>/<namespace>/<key>.json。
    写入走临时文件 + os.replace，读者不会看到半个文件；目录在首次 set 时才创建。
    OSError 原样上抛（存储不可用即本次请求失败，不重试）。
    """

    def __init__(self, root: Path | str, namespace: str, fsync: bool = True) -> None:
        self.namespace = validate_blob_name("namespace", namespace)
        self.root = Path(root)
        self.fsync = fsync

    @property
    def directory(self) -> Path:
        return self.root / self.namespace

    def _path(self, key: str) -> Path:
        return self.directory / f"{validate_blob_name('key', key)}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("blob value must be bytes")
        path = self._path(key)
        dirpath = self.directory
        dirpath.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{key}.", dir=dirpath)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
            os.replace(tmp, path)
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)
        logger.debug("blob written path=%s bytes=%s", path, len(value))


def open_blob_store(backend: str, namespace: str, root: Path | str | None = None, fsync: bool = True) -> BlobStore:
    """按配置选择后端：memory | file（file 需 root）。"""
    if backend == "memory":
        return MemoryBlobStore(namespace)
    if backend == "file":
        if root is None:
            raise ValueError("file blob backend requires root directory")
        return FileBlobStore(root, namespace, fsync=fsync)
    raise ValueError(f"unknown blob backend: {backend!r}")
