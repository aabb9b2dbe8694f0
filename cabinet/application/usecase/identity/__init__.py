"""Linked identity use cases."""

from .confirm_unlink import (
    ConfirmUnlinkRequest,
    ConfirmUnlinkResponse,
    ConfirmUnlinkUseCase,
)
from .initiate_oauth_link import (
    InitiateOAuthLinkRequest,
    InitiateOAuthLinkResponse,
    InitiateOAuthLinkUseCase,
)
from .link_oauth_identity import LinkOAuthIdentityRequest, LinkOAuthIdentityUseCase
from .link_telegram import (
    LinkIdentityResponse,
    LinkTelegramRequest,
    LinkTelegramUseCase,
)
from .list_linked_identities import (
    LinkedIdentityInfo,
    ListLinkedIdentitiesRequest,
    ListLinkedIdentitiesResponse,
    ListLinkedIdentitiesUseCase,
    TelegramRelinkInfo,
)
from .request_unlink import (
    RequestUnlinkRequest,
    RequestUnlinkResponse,
    RequestUnlinkUseCase,
)

__all__ = [
    "ConfirmUnlinkRequest",
    "ConfirmUnlinkResponse",
    "ConfirmUnlinkUseCase",
    "InitiateOAuthLinkRequest",
    "InitiateOAuthLinkResponse",
    "InitiateOAuthLinkUseCase",
    "LinkIdentityResponse",
    "LinkOAuthIdentityRequest",
    "LinkOAuthIdentityUseCase",
    "LinkTelegramRequest",
    "LinkTelegramUseCase",
    "LinkedIdentityInfo",
    "ListLinkedIdentitiesRequest",
    "ListLinkedIdentitiesResponse",
    "ListLinkedIdentitiesUseCase",
    "RequestUnlinkRequest",
    "RequestUnlinkResponse",
    "RequestUnlinkUseCase",
    "TelegramRelinkInfo",
]
