"""Connection authentication.

Verifies the bearer token presented in the socket handshake and extracts the
user identity bound to the connection. Nothing is registered anywhere until
``authenticate`` returns, so a failed attempt leaves no state behind.
"""

from collections.abc import Sequence

import jwt
from loguru import logger

from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .auth_models import AuthenticatedUser

# Claims that may carry the user id, in lookup order.
SUBJECT_CLAIMS = ("id", "userId", "_id", "sub")

TOKEN_LOG_PREFIX_LENGTH = 10


def normalize_secret(raw: str | None) -> str:
    """Strip whitespace and wrapping quotes that often leak in from env files."""
    value = (raw or "").strip()
    while len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1].strip()
    return value


def token_prefix(token: str | None) -> str:
    """Loggable, non-reversible token hint."""
    if not token:
        return "<none>"
    return f"{token[:TOKEN_LOG_PREFIX_LENGTH]}..."


class ConnectionAuthenticator:
    """Verify signed bearer tokens and resolve the subject user id."""

    def __init__(
        self,
        secret: str | None,
        algorithms: Sequence[str] = ("HS256",),
        *,
        require_exp: bool = False,
        leeway: int = 0,
    ):
        self._secret = normalize_secret(secret)
        self._algorithms = list(algorithms)
        self._require_exp = require_exp
        self._leeway = leeway

        if not self._secret:
            logger.warning("Socket JWT secret is empty, every connection will be refused")
        else:
            logger.debug("Socket JWT secret loaded (length={})", len(self._secret))

    def authenticate(self, token: str | None) -> AuthenticatedUser:
        """Verify ``token`` and return the bound identity.

        Raises:
            AppError: E_MISSING_TOKEN, E_TOKEN_EXPIRED, E_BAD_TOKEN or E_NO_SUBJECT.
        """
        if not token or not isinstance(token, str):
            raise AppError(
                errcode=AppErrorCode.E_MISSING_TOKEN,
                errmesg="No token provided",
                status_code=HttpStatusCode.UNAUTHORIZED,
            )

        hint = token_prefix(token)

        if not self._secret:
            raise AppError(
                errcode=AppErrorCode.E_BAD_TOKEN,
                errmesg="Token cannot be verified",
                status_code=HttpStatusCode.UNAUTHORIZED,
            )

        options = {"require": ["exp"]} if self._require_exp else {}
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                options=options,
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as exc:
            logger.info("Token expired: token={}", hint)
            raise AppError(
                errcode=AppErrorCode.E_TOKEN_EXPIRED,
                errmesg="Token expired",
                status_code=HttpStatusCode.UNAUTHORIZED,
            ) from exc
        except jwt.InvalidTokenError as exc:
            logger.info("Token verification failed: token={} error={}", hint, type(exc).__name__)
            raise AppError(
                errcode=AppErrorCode.E_BAD_TOKEN,
                errmesg="Invalid token",
                status_code=HttpStatusCode.UNAUTHORIZED,
            ) from exc

        user_id = self._subject_of(claims)
        if not user_id:
            logger.info("Token has no user id claim: token={}", hint)
            raise AppError(
                errcode=AppErrorCode.E_NO_SUBJECT,
                errmesg="Token has no user id",
                status_code=HttpStatusCode.UNAUTHORIZED,
            )

        logger.debug("Token verified: token={} user_id={}", hint, user_id)
        return AuthenticatedUser(user_id=user_id, expires_at=claims.get("exp"))

    @staticmethod
    def _subject_of(claims: dict) -> str | None:
        for claim in SUBJECT_CLAIMS:
            value = claims.get(claim)
            if value not in (None, ""):
                return str(value)
        return None
