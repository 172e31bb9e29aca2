from .auth_models import AuthenticatedUser
from .authenticator import ConnectionAuthenticator, normalize_secret, token_prefix

__all__ = [
    "AuthenticatedUser",
    "ConnectionAuthenticator",
    "normalize_secret",
    "token_prefix",
]
