"""Domain value objects for cabinet account linking."""

from cabinet.domain.value.identifiers import (
    AccountId,
    IdentityUnlinkEventId,
    LinkCodeId,
    LinkedIdentityId,
    ManualMergeTicketId,
    UnlinkRequestId,
)
from cabinet.domain.value.types import (
    AuthProvider,
    Blocked,
    BlockReason,
    CleanMerge,
    ConflictedMerge,
    ConflictReason,
    LinkCodeStatus,
    LinkCodeValue,
    ManualMergeDecision,
    ManualMergeStateFilter,
    MergeEvaluation,
    OAuthProviderInfo,
    OtpChannel,
    OtpDestination,
    TelegramLoginData,
    TelegramRelinkStatus,
    Unblocked,
    UnlinkAvailability,
    UnlinkEventReason,
)

__all__ = [
    # Identifiers
    "AccountId",
    "IdentityUnlinkEventId",
    "LinkCodeId",
    "LinkedIdentityId",
    "ManualMergeTicketId",
    "UnlinkRequestId",
    # Types
    "AuthProvider",
    "Blocked",
    "BlockReason",
    "CleanMerge",
    "ConflictedMerge",
    "ConflictReason",
    "LinkCodeStatus",
    "LinkCodeValue",
    "ManualMergeDecision",
    "ManualMergeStateFilter",
    "MergeEvaluation",
    "OAuthProviderInfo",
    "OtpChannel",
    "OtpDestination",
    "TelegramLoginData",
    "TelegramRelinkStatus",
    "Unblocked",
    "UnlinkAvailability",
    "UnlinkEventReason",
]
