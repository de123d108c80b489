"""Container healthcheck: exit non-zero unless the heartbeat route answers 200."""
from __future__ import annotations

import os
import sys

import httpx


def main() -> int:
    port = os.getenv("PORT", "3030")
    url = f"http://127.0.0.1:{port}/__lbheartbeat__"
    try:
        resp = httpx.get(url, timeout=2.0)
    except httpx.HTTPError as exc:
        print(f"healthcheck failed: {exc}", file=sys.stderr)
        return 1
    return 0 if resp.status_code == 200 else 1


if __name__ == "__main__":
    raise SystemExit(main())
