"""Domain value objects for account linking.

Value objects are immutable and defined by their values, not identity.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import Field, field_validator, model_validator

from cabinet.domain.value.common import RootValueObject, ValueObject
from cabinet.util.tokens import normalize_link_code


class AuthProvider(str, Enum):
    """External identity providers an account can hold."""

    TELEGRAM = "telegram"
    EMAIL = "email"
    YANDEX = "yandex"
    VK = "vk"
    GOOGLE = "google"


class LinkCodeStatus(str, Enum):
    """Lifecycle of a link code."""

    ACTIVE = "active"
    CONSUMED = "consumed"  # Merge committed
    EXHAUSTED = "exhausted"  # Attempt budget exceeded
    REVOKED = "revoked"  # Replaced by a newer code of the same account
    MANUAL_REVIEW = "manual_review"  # Handed over to a manual merge ticket


class LinkCodeValue(RootValueObject[str]):
    """Human-enterable link code.

    Input is case-insensitive and may contain whitespace; the stored value is
    the trimmed uppercase form.
    """

    @field_validator("root")
    @classmethod
    def normalize(cls, v: str) -> str:
        """Normalize and validate code format."""
        code = normalize_link_code(v)
        if not re.match(r"^[A-Z0-9]{6,32}$", code):
            raise ValueError("Link code must be 6-32 letters or digits")
        return code


class ConflictReason(str, Enum):
    """Why two accounts cannot be merged automatically."""

    BOTH_HAVE_DATA = "both_have_data"
    IDENTITY_CONFLICT = "identity_conflict"


class BlockReason(str, Enum):
    """Why an identity cannot be unlinked right now."""

    LAST_IDENTITY = "last_identity"
    COOLDOWN_ACTIVE = "cooldown_active"
    IDENTITY_NOT_LINKED = "identity_not_linked"
    PROVIDER_NOT_SUPPORTED = "provider_not_supported"
    TELEGRAM_REQUIRED = "telegram_required"
    CURRENT_AUTH_PROVIDER = "current_auth_provider"

    @property
    def is_timed(self) -> bool:
        """Whether the block lifts by itself at a known instant."""
        return self is BlockReason.COOLDOWN_ACTIVE


class ManualMergeDecision(str, Enum):
    """Adjudication state of a manual merge ticket."""

    PENDING = "pending"
    APPROVE = "approve"
    REJECT = "reject"


class ManualMergeStateFilter(str, Enum):
    """Admin list filter for manual merge tickets."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ALL = "all"

    @property
    def decision(self) -> ManualMergeDecision | None:
        """Decision matched by this filter (None matches everything)."""
        return {
            ManualMergeStateFilter.PENDING: ManualMergeDecision.PENDING,
            ManualMergeStateFilter.APPROVED: ManualMergeDecision.APPROVE,
            ManualMergeStateFilter.REJECTED: ManualMergeDecision.REJECT,
        }.get(self)


class UnlinkEventReason(str, Enum):
    """How an identity left an account."""

    USER_UNLINK = "user_unlink"
    REPLACED_BY_MERGE = "replaced_by_merge"


class OtpChannel(str, Enum):
    """Out-of-band channel an unlink OTP is delivered through."""

    TELEGRAM = "telegram"
    EMAIL = "email"


class OtpDestination(ValueObject):
    """Where an OTP goes: a Telegram chat id or an email address."""

    channel: OtpChannel
    address: str


class Unblocked(ValueObject):
    """The identity can be unlinked."""

    kind: Literal["unblocked"] = "unblocked"


class Blocked(ValueObject):
    """The identity cannot be unlinked.

    ``until`` is present exactly when the reason is a timed cooldown.
    """

    kind: Literal["blocked"] = "blocked"
    reason: BlockReason
    until: datetime | None = None

    @model_validator(mode="after")
    def check_until_matches_reason(self) -> "Blocked":
        """Reject a cooldown without an end or an end without a cooldown."""
        if self.reason.is_timed and self.until is None:
            raise ValueError(f"{self.reason.value} requires an until timestamp")
        if not self.reason.is_timed and self.until is not None:
            raise ValueError(f"{self.reason.value} cannot carry an until timestamp")
        return self


UnlinkAvailability = Annotated[Union[Unblocked, Blocked], Field(discriminator="kind")]


class CleanMerge(ValueObject):
    """The source account can be merged into the target without review."""

    kind: Literal["clean"] = "clean"
    replaces_telegram: bool = False  # Target's Telegram will be replaced by source's
    carry_source_state: bool = False  # Only the source has monetizable state


class ConflictedMerge(ValueObject):
    """The merge needs a human decision."""

    kind: Literal["conflict"] = "conflict"
    reason: ConflictReason


MergeEvaluation = Annotated[
    Union[CleanMerge, ConflictedMerge], Field(discriminator="kind")
]


class TelegramRelinkStatus(ValueObject):
    """Whether a Telegram identity can be attached to the account now."""

    can_start_relink: bool
    requires_unlink_first: bool
    cooldown_until: datetime | None = None
    retry_after_seconds: int | None = None


class OAuthProviderInfo(ValueObject):
    """User info returned from an OAuth provider."""

    provider: AuthProvider
    provider_user_id: str
    handle: str | None = None
    email: str | None = None
    display_name: str | None = None


class TelegramLoginData(ValueObject):
    """Payload signed by the Telegram login widget."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    photo_url: str | None = None
    auth_date: int
    hash: str
