"""Socket.IO transport for the realtime hub.

Clients connect with a bearer token in ``auth.token`` (``{ auth: { token } }``
in the JS client), in the ``token`` query parameter, or in an
``Authorization: Bearer`` header. Every other event is forwarded untouched to
the dispatcher, which validates and applies it.
"""

from typing import Any
from urllib.parse import parse_qs

import socketio
from loguru import logger

from app.app_config import get_app_environ_config
from app.domain.realtime.auth import ConnectionAuthenticator, token_prefix
from app.domain.realtime.delivery import Delivery
from app.domain.realtime.hub import ClientEvent, Connect, Disconnect, EventDispatcher, RealtimeHub
from app.schemas import InboundEvent
from app.services.integrations.follower_directory import get_follower_directory
from app.utils.app_errors import AppError, AppErrorCode

_app_config = get_app_environ_config()

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=_app_config.API_CORS_ORIGINS or "*",
    ping_interval=_app_config.SOCKETIO_PING_INTERVAL,
    ping_timeout=_app_config.SOCKETIO_PING_TIMEOUT,
    logger=False,
    engineio_logger=False,
)

# Reasons sent back to a refused client.
REFUSAL_REASONS = {
    AppErrorCode.E_MISSING_TOKEN.value: "unauthorized",
    AppErrorCode.E_BAD_TOKEN.value: "unauthorized",
    AppErrorCode.E_NO_SUBJECT.value: "unauthorized",
    AppErrorCode.E_TOKEN_EXPIRED.value: "jwt_expired",
}


class SocketIOSink:
    """Performs hub deliveries on a Socket.IO server."""

    def __init__(self, server: socketio.AsyncServer):
        self._server = server

    async def emit(self, delivery: Delivery) -> None:
        if delivery.is_broadcast:
            await self._server.emit(delivery.event, delivery.payload)
        else:
            await self._server.emit(delivery.event, delivery.payload, to=delivery.to)


def extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Pick the bearer token out of the handshake.

    Lookup order: ``auth.token``, ``?token=`` query parameter, then the
    ``Authorization`` header.
    """
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token.strip():
            return auth_token.strip()

    scope: Any = environ
    if isinstance(environ, dict) and isinstance(environ.get("asgi.scope"), dict):
        scope = environ["asgi.scope"]

    query_string: str | bytes = ""
    if isinstance(environ, dict) and "QUERY_STRING" in environ:
        query_string = environ.get("QUERY_STRING", "")
    elif isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token.strip():
        return token.strip()

    header = environ.get("HTTP_AUTHORIZATION", "") if isinstance(environ, dict) else ""
    scheme, _, credentials = str(header).partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return None


_authenticator: ConnectionAuthenticator | None = None
_dispatcher: EventDispatcher | None = None


def get_authenticator() -> ConnectionAuthenticator:
    global _authenticator

    if _authenticator is None:
        _authenticator = ConnectionAuthenticator(
            _app_config.SOCKET_JWT_SECRET,
            algorithms=[_app_config.SOCKET_JWT_ALGORITHM],
            require_exp=_app_config.SOCKET_JWT_REQUIRE_EXP,
        )
    return _authenticator


def get_dispatcher() -> EventDispatcher:
    global _dispatcher

    if _dispatcher is None:
        _dispatcher = EventDispatcher(
            RealtimeHub(),
            SocketIOSink(sio),
            followers=get_follower_directory(),
        )
    return _dispatcher


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = extract_token(environ, auth)
    try:
        user = get_authenticator().authenticate(token)
    except AppError as exc:
        logger.info("Connection refused: sid={} errcode={} token={}", sid, exc.errcode, token_prefix(token))
        raise ConnectionRefusedError(REFUSAL_REASONS.get(exc.errcode, "unauthorized")) from exc

    await sio.save_session(sid, {"user_id": user.user_id})
    await get_dispatcher().submit(Connect(connection_id=sid, user_id=user.user_id))


@sio.event
async def disconnect(sid: str, reason: Any = None):
    logger.debug("Socket disconnected: sid={} reason={}", sid, reason)
    await get_dispatcher().submit(Disconnect(connection_id=sid))


def _make_event_handler(event: str):
    async def handler(sid: str, data: Any = None):
        return await get_dispatcher().submit(ClientEvent(connection_id=sid, event=event, data=data))

    handler.__name__ = f"on_{event.replace('-', '_')}"
    return handler


for _event in InboundEvent:
    sio.on(_event.value, handler=_make_event_handler(_event.value))
