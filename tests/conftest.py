from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from rial_rates.config import TrackerConfig


class FakeResponse:
    def __init__(self, *, status_code: int = 200, text: str = "", payload: Any = None) -> None:
        self.status_code = status_code
        if payload is not None:
            text = json.dumps(payload, ensure_ascii=False)
        self.text = text
        self.content = text.encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)  # type: ignore[arg-type]


class FakeSession:
    def __init__(self, response: FakeResponse | Exception) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def config(tmp_path) -> TrackerConfig:
    return TrackerConfig(snapshot_path=tmp_path / "rates.json")
