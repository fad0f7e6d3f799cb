"""Roblox avatar lookup — implements the AvatarResolver interface.

Two sequential calls: username → user id (users API), then user id →
150x150 headshot URL (thumbnails API). Any failure means "no avatar".
"""

import logging
from typing import Any

import httpx

from app.application.interfaces.avatar_resolver import AvatarResolver
from app.domain.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class RobloxAvatarResolver(AvatarResolver):
    def __init__(
        self,
        users_url: str = "https://users.roblox.com/v1/usernames/users",
        thumbnails_url: str = "https://thumbnails.roblox.com/v1/users/avatar-headshot",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._users_url = users_url
        self._thumbnails_url = thumbnails_url
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=10.0)

    async def resolve(self, username: str | None) -> str | None:
        if not username:
            return None

        client = await self._get_client()
        should_close = self._http_client is None
        try:
            user_id = await self._lookup_user_id(client, username)
            return await self._lookup_headshot(client, user_id)
        except (UpstreamError, httpx.HTTPError) as exc:
            logger.info("No avatar for %r: %s", username, exc)
            return None
        finally:
            if should_close:
                await client.aclose()

    async def _lookup_user_id(self, client: httpx.AsyncClient, username: str) -> int:
        response = await client.post(
            self._users_url,
            json={"usernames": [username], "excludeBannedUsers": True},
        )
        user_id = self._first(response, "id")
        if not user_id:
            raise UpstreamError("roblox", f"unknown username {username!r}")
        return user_id

    async def _lookup_headshot(self, client: httpx.AsyncClient, user_id: int) -> str:
        response = await client.get(
            self._thumbnails_url,
            params={"userIds": user_id, "size": "150x150", "format": "Png"},
        )
        image_url = self._first(response, "imageUrl")
        if not image_url:
            raise UpstreamError("roblox", f"no headshot for user {user_id}")
        return image_url

    @staticmethod
    def _first(response: httpx.Response, key: str) -> Any:
        """Read ``data[0][key]`` from a Roblox list response."""
        if not response.is_success:
            raise UpstreamError("roblox", f"HTTP {response.status_code} from {response.url}")
        try:
            items = response.json().get("data") or []
            return items[0].get(key) if items else None
        except (ValueError, AttributeError) as exc:
            raise UpstreamError("roblox", f"malformed response: {exc}") from exc
