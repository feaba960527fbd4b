"""Shared fixtures: a scripted origin and a controllable clock."""

import asyncio
from collections.abc import Mapping

import pytest

from m3u8_proxy.entities import OriginResponse
from m3u8_proxy.exceptions import OriginFetchError


class FakeOriginClient:
    """OriginClient that serves canned responses and records every request."""

    def __init__(self, responses: dict[str, OriginResponse | Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    def add(self, url: str, content: bytes, status_code: int = 200, **headers: str) -> None:
        self.responses[url] = OriginResponse(
            status_code=status_code,
            reason_phrase="OK" if status_code < 400 else "Not Found",
            content=content,
            headers={name.replace("_", "-"): value for name, value in headers.items()},
        )

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> OriginResponse:
        self.calls.append((url, dict(headers or {})))
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.get(url)
        if response is None:
            raise OriginFetchError(url, reason="connection refused")
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def origin():
    return FakeOriginClient()


@pytest.fixture
def clock():
    return FakeClock()
