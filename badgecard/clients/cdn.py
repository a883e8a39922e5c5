"""Read-only fetches of avatar and badge icon images."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

import httpx
from fastapi import status

from badgecard.core.exceptions import RenderError


class AssetClient:
    """Download image assets referenced by the identity card."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch_many(self, urls: Iterable[str]) -> list[bytes]:
        """Fetch several assets concurrently, preserving the input order.

        The first failure cancels the downloads still in flight before the
        shared client is closed.
        """
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport, follow_redirects=True
        ) as client:
            tasks = [
                asyncio.ensure_future(self._fetch_with(client, url)) for url in urls
            ]
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

    @staticmethod
    async def _fetch_with(client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            raise RenderError(f"Failed to fetch asset {url}: {exc}") from exc
        if response.status_code != status.HTTP_200_OK:
            raise RenderError(f"Asset {url} returned HTTP {response.status_code}.")
        return response.content


__all__ = ["AssetClient"]
