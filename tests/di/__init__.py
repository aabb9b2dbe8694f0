"""Mock providers for testing."""

from .clock import MockClockProvider
from .notifications import MockNotificationsProvider
from .oauth import MockOAuthProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockClockProvider",
    "MockNotificationsProvider",
    "MockOAuthProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
