"""
Container health check for the demand API.

Exits 0 only when the API answers and reports a loaded snapshot, unless
HEALTHCHECK_ALLOW_EMPTY is truthy.
"""

from __future__ import annotations

import json
import os
from urllib.error import URLError
from urllib.request import urlopen


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    allow_empty = os.getenv("HEALTHCHECK_ALLOW_EMPTY", "").strip().lower() in {"1", "true", "yes", "on"}
    url = f"http://127.0.0.1:{port}{path}"

    try:
        with urlopen(url, timeout=2) as response:
            if not 200 <= response.status < 400:
                return 1
            body = json.loads(response.read().decode("utf-8"))
    except (URLError, TimeoutError, ValueError):
        return 1

    if allow_empty:
        return 0
    return 0 if body.get("dataLoaded") else 1


if __name__ == "__main__":
    raise SystemExit(main())
