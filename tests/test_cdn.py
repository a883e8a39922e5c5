from __future__ import annotations

import asyncio

import httpx
import pytest

from badgecard.clients.cdn import AssetClient
from badgecard.core.exceptions import RenderError


@pytest.mark.asyncio
async def test_fetch_many_preserves_request_order() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=request.url.path.encode())

    client = AssetClient(transport=httpx.MockTransport(handler))

    payloads = await client.fetch_many(
        ["https://cdn.example/a.png", "https://cdn.example/b.png", "https://cdn.example/c.png"]
    )

    assert payloads == [b"/a.png", b"/b.png", b"/c.png"]


@pytest.mark.asyncio
async def test_missing_asset_raises_render_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing.png":
            return httpx.Response(404)
        return httpx.Response(200, content=b"ok")

    client = AssetClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RenderError):
        await client.fetch_many(["https://cdn.example/ok.png", "https://cdn.example/missing.png"])


@pytest.mark.asyncio
async def test_unreachable_cdn_raises_render_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = AssetClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RenderError):
        await client.fetch_many(["https://cdn.example/a.png"])


@pytest.mark.asyncio
async def test_failed_asset_cancels_downloads_still_in_flight() -> None:
    slow_started = asyncio.Event()
    cancelled = []

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/avatar.png":
            slow_started.set()
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(request.url.path)
                raise
            return httpx.Response(200, content=b"late")
        await slow_started.wait()
        return httpx.Response(404)

    client = AssetClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RenderError):
        await asyncio.wait_for(
            client.fetch_many(
                ["https://cdn.example/avatar.png", "https://cdn.example/staff.png"]
            ),
            timeout=5,
        )

    assert cancelled == ["/avatar.png"]
