from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests


@dataclass(frozen=True)
class ServerStatus:
    ok: bool
    base_url: str
    status_code: Optional[int] = None
    error: Optional[str] = None


def check_server(base_url: str, timeout_s: float = 2.0) -> ServerStatus:
    """
    Returns ServerStatus for a local media server (e.g. AllTalk).
    - ok=False if unreachable or answering 5xx
    - never raises
    """
    url = base_url.rstrip("/") + "/"
    try:
        resp = requests.get(url, timeout=timeout_s)
    except requests.RequestException as e:
        return ServerStatus(ok=False, base_url=base_url, error=str(e))

    if resp.status_code >= 500:
        return ServerStatus(
            ok=False,
            base_url=base_url,
            status_code=resp.status_code,
            error=f"HTTP {resp.status_code}: {resp.text[:200]}",
        )
    # Any answer below 500 (even a 404 on "/") means the server is up.
    return ServerStatus(ok=True, base_url=base_url, status_code=resp.status_code)
