"""VK OAuth adapter."""

from .client import MockVKOAuthClient, RealVKOAuthClient, VKOAuthClient

__all__ = ["VKOAuthClient", "RealVKOAuthClient", "MockVKOAuthClient"]
