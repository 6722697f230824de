from __future__ import annotations

import os
import json
from dataclasses import dataclass
from typing import Mapping
from urllib.error import URLError
from urllib.request import Request, urlopen
from urllib.parse import urlencode

from .models import ConfigError


REQUIRED_KEYS = [
    "SERPAPI_KEY",
]

OPTIONAL_KEYS = [
    "BROWSERLESS_URL",
    "BROWSERLESS_TOKEN",
]

_PLACEHOLDERS = {"PLACEHOLDER", "MASKED", ""}

# Infisical machine identity; only used by --infisical.
INFISICAL_URL = os.environ.get("INFISICAL_URL", "http://localhost:8089")
INFISICAL_CLIENT_ID = os.environ.get("INFISICAL_CLIENT_ID", "")
INFISICAL_CLIENT_SECRET = os.environ.get("INFISICAL_CLIENT_SECRET", "")
INFISICAL_PROJECT_ID = os.environ.get("INFISICAL_PROJECT_ID", "")
INFISICAL_TIMEOUT_S = 15


@dataclass(frozen=True)
class Config:
    serpapi_key: str
    browserless_url: str | None = None
    browserless_token: str | None = None

    @property
    def has_browserless(self) -> bool:
        return bool(self.browserless_url and self.browserless_token)

    @staticmethod
    def from_mapping(values: Mapping[str, str], *, origin: str = "environment") -> "Config":
        for k in REQUIRED_KEYS:
            val = values.get(k)
            if val is None:
                raise ConfigError(f"Missing {origin} setting: {k}")
            if val.strip() in _PLACEHOLDERS:
                raise ConfigError(f"{origin} setting {k} is still a placeholder")

        def optional(k: str) -> str | None:
            val = (values.get(k) or "").strip()
            return None if val in _PLACEHOLDERS else val

        browserless_url = optional("BROWSERLESS_URL")
        return Config(
            serpapi_key=values["SERPAPI_KEY"].strip(),
            browserless_url=browserless_url.rstrip("/") if browserless_url else None,
            browserless_token=optional("BROWSERLESS_TOKEN"),
        )

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None) -> "Config":
        return Config.from_mapping(os.environ if environ is None else environ)

    @staticmethod
    def load_from_infisical(*, env: str = "dev") -> "Config":
        if not (INFISICAL_CLIENT_ID and INFISICAL_CLIENT_SECRET and INFISICAL_PROJECT_ID):
            raise ConfigError(
                "INFISICAL_CLIENT_ID, INFISICAL_CLIENT_SECRET and INFISICAL_PROJECT_ID must be set"
            )
        token = _infisical_login()
        secrets = _infisical_list_secrets(token, env=env)
        return Config.from_mapping(secrets, origin="Infisical")


def _infisical_request(path: str, *, token: str | None = None, body: dict | None = None) -> dict:
    headers = {"Accept": "application/json"}
    data = None
    if body is not None:
        data = json.dumps(body).encode()
        headers["Content-Type"] = "application/json"
    if token:
        headers["Authorization"] = f"Bearer {token}"

    req = Request(f"{INFISICAL_URL.rstrip('/')}{path}", data=data, headers=headers, method="POST" if body else "GET")
    try:
        with urlopen(req, timeout=INFISICAL_TIMEOUT_S) as resp:
            return json.loads(resp.read())
    except (URLError, ValueError) as e:
        raise ConfigError(f"Infisical request {path.split('?')[0]} failed: {e}") from e


def _infisical_login() -> str:
    """Universal Auth machine identity login."""
    data = _infisical_request(
        "/api/v1/auth/universal-auth/login",
        body={"clientId": INFISICAL_CLIENT_ID, "clientSecret": INFISICAL_CLIENT_SECRET},
    )
    token = data.get("accessToken")
    if not token:
        raise ConfigError("Infisical login returned no access token")
    return token


def _infisical_list_secrets(token: str, *, env: str = "dev") -> dict[str, str]:
    query = urlencode({"projectId": INFISICAL_PROJECT_ID, "environment": env, "secretPath": "/"})
    data = _infisical_request(f"/api/v4/secrets?{query}", token=token)
    return {s["secretKey"]: s["secretValue"] for s in data.get("secrets", []) if "secretKey" in s}
