"""Domain services."""

from .account_service import AccountService
from .auth_service import AuthService, OAuthClient, OAuthError
from .base import Service
from .conflict_resolver import ConflictResolver
from .housekeeping_service import HousekeepingService, PurgeResult
from .identity_service import IdentityService, evaluate_unlink
from .jwt_service import JWTService, SessionTokens
from .link_code_service import LinkCodeService, ResolvedLinkCode
from .manual_merge_service import ManualMergeService
from .merge_service import AccountMergeService, StateTransfer
from .notification import OtpDeliveryError, OtpSender
from .telegram_auth_service import TelegramAuthService
from .unlink_service import IssuedUnlinkRequest, UnlinkService

__all__ = [
    "AccountMergeService",
    "AccountService",
    "AuthService",
    "ConflictResolver",
    "HousekeepingService",
    "IdentityService",
    "IssuedUnlinkRequest",
    "JWTService",
    "LinkCodeService",
    "ManualMergeService",
    "OAuthClient",
    "OAuthError",
    "OtpDeliveryError",
    "OtpSender",
    "PurgeResult",
    "ResolvedLinkCode",
    "Service",
    "SessionTokens",
    "StateTransfer",
    "TelegramAuthService",
    "UnlinkService",
    "evaluate_unlink",
]
