from pydantic import BaseModel

from app.shared.config import config


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class AppEnvironConfig(BaseModel):
    DEBUG: bool = config.get("DEBUG", "false").strip().lower() == "true"  # type: ignore
    LOG_LEVEL: str = (config.get("LOG_LEVEL") or "").strip().upper() or "INFO"

    # HTTP server
    API_HOST: str = config.get("API_HOST", "0.0.0.0").strip()  # type: ignore
    API_PORT: int = int((config.get("API_PORT") or "").strip() or 4000)
    # In-memory state is per process; more than one worker splits the registries.
    API_WORKERS: int = int((config.get("API_WORKERS") or "").strip() or 1)
    API_CORS_ORIGINS: list[str] = _csv(config.get("API_CORS_ORIGINS", "http://localhost:3000"))  # type: ignore

    # Socket.IO transport
    SOCKETIO_PATH: str = config.get("SOCKETIO_PATH", "socket.io").strip().strip("/")  # type: ignore
    SOCKETIO_PING_INTERVAL: int = int((config.get("SOCKETIO_PING_INTERVAL") or "").strip() or 25)
    SOCKETIO_PING_TIMEOUT: int = int((config.get("SOCKETIO_PING_TIMEOUT") or "").strip() or 20)

    # Connection authentication. The raw secret is normalized by the authenticator.
    SOCKET_JWT_SECRET: str | None = config.get("SOCKET_JWT_SECRET") or config.get("JWT_SECRET")
    SOCKET_JWT_ALGORITHM: str = config.get("SOCKET_JWT_ALGORITHM", "HS256").strip()  # type: ignore
    SOCKET_JWT_REQUIRE_EXP: bool = (
        config.get("SOCKET_JWT_REQUIRE_EXP", "false").strip().lower() == "true"  # type: ignore
    )

    # Dev-only token minting endpoint
    DEMO_MODE: bool = config.get("DEMO_MODE", "false").strip().lower() == "true"  # type: ignore
    DEMO_TOKEN_TTL_SECONDS: int = int((config.get("DEMO_TOKEN_TTL_SECONDS") or "").strip() or 3600)

    # Follower lookup used for "friend went live" notifications (optional)
    FOLLOWERS_API_URL: str | None = (config.get("FOLLOWERS_API_URL") or "").strip() or None
    FOLLOWERS_API_TIMEOUT: float = float((config.get("FOLLOWERS_API_TIMEOUT") or "").strip() or 5)
    FOLLOWERS_API_KEY: str | None = (config.get("FOLLOWERS_API_KEY") or "").strip() or None


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
