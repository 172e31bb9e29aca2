"""Tests for the follower directory HTTP client."""

import httpx
import pytest

from app.services.integrations import follower_directory
from app.services.integrations.follower_directory import FollowerDirectory, get_follower_directory


def make_directory(handler) -> FollowerDirectory:
    return FollowerDirectory(
        "https://social.example.test/api/",
        timeout=1.0,
        api_key="k-123",
        transport=httpx.MockTransport(handler),
    )


class TestGetFollowers:
    @pytest.mark.asyncio
    async def test_parses_camel_case_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["api_key"] = request.headers.get("X-Api-Key")
            return httpx.Response(200, json={"hostName": "Host", "followerIds": ["f1", 2]})

        info = await make_directory(handler).get_followers("host-1")

        assert seen == {
            "url": "https://social.example.test/api/users/host-1/followers",
            "api_key": "k-123",
        }
        assert info is not None
        assert info.host_name == "Host"
        assert info.follower_ids == ["f1", "2"]

    @pytest.mark.asyncio
    async def test_unwraps_results_envelope(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"success": True, "results": {"host_name": "Host", "follower_ids": ["f1"]}},
            )

        info = await make_directory(handler).get_followers("host-1")

        assert info.host_name == "Host"
        assert info.follower_ids == ["f1"]

    @pytest.mark.asyncio
    async def test_unknown_user_returns_none(self):
        info = await make_directory(lambda request: httpx.Response(404)).get_followers("ghost")

        assert info is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        with pytest.raises(httpx.HTTPStatusError):
            await make_directory(lambda request: httpx.Response(503)).get_followers("host-1")


class TestGetFollowerDirectory:
    def test_disabled_without_url(self, monkeypatch):
        config = follower_directory.get_app_environ_config()
        monkeypatch.setattr(config, "FOLLOWERS_API_URL", None)

        assert get_follower_directory() is None

    def test_built_once_from_config(self, monkeypatch):
        config = follower_directory.get_app_environ_config()
        monkeypatch.setattr(config, "FOLLOWERS_API_URL", "https://social.example.test")
        monkeypatch.setattr(follower_directory, "_follower_directory", None)

        first = get_follower_directory()
        second = get_follower_directory()

        assert first is second
        assert first.base_url == "https://social.example.test"
