"""Yandex ID OAuth adapter."""

from .client import MockYandexOAuthClient, RealYandexOAuthClient, YandexOAuthClient

__all__ = ["YandexOAuthClient", "RealYandexOAuthClient", "MockYandexOAuthClient"]
