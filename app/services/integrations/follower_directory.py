import httpx
from loguru import logger

from app.app_config import get_app_environ_config
from app.domain.realtime.live import FollowerInfo


class FollowerDirectory:
    """HTTP client for the social graph service.

    ``GET {base_url}/users/{user_id}/followers`` is expected to answer with
    ``{"hostName": ..., "followerIds": [...]}``; a ``results`` envelope is
    unwrapped if present.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def get_followers(self, user_id: str) -> FollowerInfo | None:
        """Fetch the followers of ``user_id``; None when the user is unknown."""
        url = f"{self.base_url}/users/{user_id}/followers"
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.get(url, headers=self._build_headers())
            if response.status_code == httpx.codes.NOT_FOUND:
                logger.debug("Follower lookup: unknown user {}", user_id)
                return None
            response.raise_for_status()
            data = response.json()

        if isinstance(data, dict) and isinstance(data.get("results"), dict):
            data = data["results"]

        info = FollowerInfo(
            host_name=data.get("hostName") or data.get("host_name"),
            follower_ids=[str(item) for item in data.get("followerIds") or data.get("follower_ids") or []],
        )
        logger.debug("Follower lookup: user_id={} followers={}", user_id, len(info.follower_ids))
        return info


_follower_directory: FollowerDirectory | None = None


def get_follower_directory() -> FollowerDirectory | None:
    """Configured directory, or None when follower notifications are disabled."""
    global _follower_directory

    app_config = get_app_environ_config()
    if not app_config.FOLLOWERS_API_URL:
        return None

    if _follower_directory is None:
        _follower_directory = FollowerDirectory(
            base_url=app_config.FOLLOWERS_API_URL,
            timeout=app_config.FOLLOWERS_API_TIMEOUT,
            api_key=app_config.FOLLOWERS_API_KEY,
        )
    return _follower_directory
