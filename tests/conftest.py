from __future__ import annotations

import io

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def make_response(
    status: int = 200,
    reason: str = "OK",
    headers: dict | None = None,
    body: bytes = b"",
    raw=None,
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.raw = raw if raw is not None else io.BytesIO(body)
    return resp


class FlakyRaw(io.BytesIO):
    """Hands out a few bytes, then fails like a dropped connection."""

    def read(self, size=-1):
        if self.tell() > 0:
            raise OSError("connection reset by peer")
        return super().read(4)


@pytest.fixture
def response_factory():
    return make_response
