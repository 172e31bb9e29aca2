"""Demo endpoint for socket token generation.

Signs a short-lived token with the socket secret so a local client can
connect without a separate identity service. Only mounted when
``DEMO_MODE=true``.
"""

import time

import jwt
from fastapi import APIRouter, Query

from app.api.realtime.socket_server import get_authenticator
from app.api.v1.schemas.base import ApiOut
from app.app_config import get_app_environ_config
from app.domain.realtime.auth import normalize_secret
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

router = APIRouter(prefix="/demo/auth", tags=["Dev Only"])


@router.get("/token")
async def get_demo_auth_token(
    user_id: str = Query("test_user", min_length=1, description="User ID for the token"),
) -> ApiOut[dict]:
    """Generate a token for socket testing. DO NOT use in production.

    Example:
        GET /api/demo/auth/token?user_id=test_user
    """
    config = get_app_environ_config()
    secret = normalize_secret(config.SOCKET_JWT_SECRET)
    if not secret:
        raise AppError(
            errcode=AppErrorCode.E_CONFIG,
            errmesg="SOCKET_JWT_SECRET not configured",
            status_code=HttpStatusCode.INTERNAL_SERVER_ERROR,
        )

    expires_at = int(time.time()) + config.DEMO_TOKEN_TTL_SECONDS
    token = jwt.encode(
        {"sub": user_id, "id": user_id, "exp": expires_at},
        secret,
        algorithm=config.SOCKET_JWT_ALGORITHM,
    )
    # Sanity check against the live authenticator before handing it out.
    get_authenticator().authenticate(token)

    return ApiOut[dict](results={"token": token, "user_id": user_id, "expires_at": expires_at})
