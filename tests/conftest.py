import os
import warnings

# Ignore warnings from app.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="app.shared.*")

# Set test environment variables before any app module reads the config
os.environ.update(
    {
        "SOCKET_JWT_SECRET": "test-socket-secret-0123456789abcdef",
        "SOCKET_JWT_ALGORITHM": "HS256",
        "DEMO_MODE": "true",
        "FOLLOWERS_API_URL": "",
        "LOG_LEVEL": "DEBUG",
    }
)

# Import realtime fixtures so they are available to all tests
from tests.fixtures.realtime_fixtures import *  # noqa: E402, F403
