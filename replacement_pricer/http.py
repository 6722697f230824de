from __future__ import annotations

from dataclasses import dataclass
import requests


@dataclass(frozen=True)
class HttpClient:
    base_url: str
    timeout_s: float = 8.0

    def get(self, path: str, *, params: dict | None = None) -> requests.Response:
        url = self.base_url.rstrip("/") + "/" + path.lstrip("/")
        return requests.get(
            url,
            params=params,
            headers={
                "Accept": "application/json",
                "Accept-Encoding": "gzip, deflate",
            },
            timeout=self.timeout_s,
        )
