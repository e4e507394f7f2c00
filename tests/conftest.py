"""Shared fakes for the SiliconFlow HTTP layer."""

from __future__ import annotations

import json
from typing import Any, Optional

import pytest
import requests

from config.settings import AppConfig


def make_response(status: int, body: Any = None, url: str = "https://api.siliconflow.cn/v1/images/generations"):
    """Build a real requests.Response carrying a JSON (or raw bytes) body."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    if isinstance(body, bytes):
        response._content = body
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    return response


class DummySession:
    """替代 requests.Session，记录 POST 调用。"""

    def __init__(self, response: Optional[requests.Response] = None, error: Optional[Exception] = None) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.response = response
        self.error = error

    def post(self, url: str, json: Any = None, timeout: Optional[float] = None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(siliconflow_key="sk-test", log_dir=None)


@pytest.fixture
def make_session():
    """Return a factory producing DummySession objects."""

    def _make(status: int = 200, body: Any = None, error: Optional[Exception] = None) -> DummySession:
        if error is not None:
            return DummySession(error=error)
        return DummySession(response=make_response(status, body))

    return _make
