#!/usr/bin/env python3
"""
对运行中的服务做冒烟：OPTIONS / GET / POST 非法 JSON / POST 合法 / 再 GET / PUT 405。
注意：会整份覆盖服务端当前文档，只对 demo 实例使用。

启动：python -m uvicorn labboard.main:app --host 127.0.0.1 --port 8000
"""
from __future__ import annotations

import argparse
import sys

import requests

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_PATH = "/api/dashboard-state"
CORS_HEADERS = ("Access-Control-Allow-Origin", "Access-Control-Allow-Methods", "Access-Control-Allow-Headers")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Smoke test for the dashboard state endpoint (overwrites the document).")
    p.add_argument("--base_url", default=DEFAULT_BASE_URL, help="Base URL (default: %(default)s)")
    p.add_argument("--path", default=DEFAULT_PATH, help="State route path (default: %(default)s)")
    p.add_argument("--timeout", type=float, default=5.0, help="Per-request timeout seconds")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    url = args.base_url.rstrip("/") + args.path
    timeout = args.timeout
    ok = 0
    fail = 0

    def check(cond: bool, label: str, detail: str = "") -> None:
        nonlocal ok, fail
        if cond:
            ok += 1
            print(f"PASS: {label}")
        else:
            fail += 1
            print(f"FAIL: {label} {detail}")

    try:
        r = requests.options(url, timeout=timeout)
    except requests.RequestException as e:
        print(f"SKIP: service not reachable at {url}: {e}")
        return 0
    check(r.status_code == 204, "OPTIONS -> 204", f"got={r.status_code}")
    check(all(h in r.headers for h in CORS_HEADERS), "OPTIONS carries CORS headers", str(dict(r.headers)))

    r = requests.get(url, timeout=timeout)
    check(r.status_code == 200, "GET -> 200", f"got={r.status_code}")
    check("no-store" in r.headers.get("Cache-Control", ""), "GET Cache-Control no-store")
    before = r.json() if r.status_code == 200 else None

    r = requests.post(url, data="not json", headers={"Content-Type": "application/json"}, timeout=timeout)
    check(r.status_code == 400, "POST not json -> 400", f"got={r.status_code} {r.text[:200]}")
    after_bad = requests.get(url, timeout=timeout).json()
    if before is not None:
        # lastCorrectionDate 缺失时每次 GET 取当前时间，比较时忽略
        strip = lambda d: {k: v for k, v in d.items() if k != "lastCorrectionDate"}  # noqa: E731
        check(strip(after_bad) == strip(before), "POST 400 left state unchanged")

    payload = {
        "notice": "<b>smoke</b>",
        "benches": {"Hema": "smoke-user", "NotABench": "x"},
        "kanban": {"list-todo": "not-an-array", "list-progress": [{"id": "smoke-1", "text": "check"}]},
        "layout": {"noticePercent": 50, "rotationPercent": 45},
    }
    r = requests.post(url, json=payload, timeout=timeout)
    check(r.status_code == 200, "POST valid -> 200", f"got={r.status_code} {r.text[:200]}")
    body = r.json() if r.status_code == 200 else {}
    data = body.get("data") or {}
    check(body.get("success") is True, "POST envelope success=true", str(body)[:200])
    check((data.get("benches") or {}).get("Hema") == "smoke-user", "POST bench value kept")
    check("NotABench" not in (data.get("benches") or {}), "POST unknown bench dropped")
    check((data.get("kanban") or {}).get("list-todo") == [], "POST invalid column -> []")
    check(data.get("layout") == {"noticePercent": 15, "rotationPercent": 20}, "POST layout sum 95 -> 15/20")

    r = requests.get(url, timeout=timeout)
    check(r.json() == data, "GET returns the POSTed document")

    r = requests.put(url, json={}, timeout=timeout)
    check(r.status_code == 405, "PUT -> 405", f"got={r.status_code}")

    print(f"ok={ok} fail={fail}")
    return 1 if fail else 0


if __name__ == "__main__":
    sys.exit(main())
