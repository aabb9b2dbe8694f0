"""Domain layer errors.

Every account linking failure carries a stable machine-readable ``ErrorCode``
and belongs to one ``ErrorKind``; the interface layer maps kinds to HTTP
statuses and serializes the code, message and timing hints.
"""

from datetime import datetime
from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Category of a linking failure."""

    VALIDATION = "validation"
    STATE_CONFLICT = "state_conflict"
    POLICY_BLOCK = "policy_block"
    RATE_LIMIT = "rate_limit"
    DEPENDENCY_UNAVAILABLE = "dependency_unavailable"
    CONFLICT_REQUIRES_HUMAN = "conflict_requires_human"


class ErrorCode(str, Enum):
    """Stable error codes returned to clients."""

    # Link codes
    LINK_CODE_INVALID = "link_code_invalid"
    LINK_CODE_SAME_ACCOUNT = "link_code_same_account"
    LINK_CODE_ATTEMPTS_EXCEEDED = "link_code_attempts_exceeded"
    LINK_CODE_SOURCE_INACTIVE = "link_code_source_inactive"
    LINK_CODE_TARGET_INACTIVE = "link_code_target_inactive"
    ACCOUNT_INACTIVE = "account_inactive"

    # Manual merge
    MANUAL_MERGE_REQUIRED = "manual_merge_required"
    MANUAL_MERGE_NOT_REQUIRED = "manual_merge_not_required"
    MANUAL_MERGE_ALREADY_PENDING = "manual_merge_already_pending"
    MANUAL_MERGE_REJECTED = "manual_merge_rejected"
    MANUAL_MERGE_ALREADY_RESOLVED = "manual_merge_already_resolved"
    MANUAL_MERGE_INVALID_PRIMARY = "manual_merge_invalid_primary"
    SUPPORT_DISABLED = "support_disabled"

    # Unlink
    IDENTITY_NOT_LINKED = "identity_not_linked"
    LAST_IDENTITY = "last_identity"
    PROVIDER_NOT_SUPPORTED = "provider_not_supported"
    COOLDOWN_ACTIVE = "cooldown_active"
    UNLINK_OTP_RESEND_COOLDOWN = "unlink_otp_resend_cooldown"
    UNLINK_REQUEST_INVALID = "unlink_request_invalid"
    UNLINK_REQUEST_MISMATCH = "unlink_request_mismatch"
    UNLINK_OTP_INVALID = "unlink_otp_invalid"
    UNLINK_OTP_ATTEMPTS_EXCEEDED = "unlink_otp_attempts_exceeded"
    UNLINK_OTP_RATE_LIMITED = "unlink_otp_rate_limited"
    UNLINK_OTP_DELIVERY_FAILED = "unlink_otp_delivery_failed"

    # Attach
    TELEGRAM_RELINK_REQUIRES_UNLINK = "telegram_relink_requires_unlink"
    TELEGRAM_RELINK_COOLDOWN_ACTIVE = "telegram_relink_cooldown_active"
    TELEGRAM_AUTH_INVALID = "telegram_auth_invalid"
    OAUTH_FAILED = "oauth_failed"
    IDENTITY_LINKED_TO_OTHER_ACCOUNT = "identity_linked_to_other_account"
    PROVIDER_ALREADY_LINKED = "provider_already_linked"


DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.LINK_CODE_INVALID: "Link code is invalid or expired",
    ErrorCode.LINK_CODE_SAME_ACCOUNT: "Link code belongs to this account",
    ErrorCode.LINK_CODE_ATTEMPTS_EXCEEDED: "Too many attempts for this link code",
    ErrorCode.LINK_CODE_SOURCE_INACTIVE: "The account behind this code is inactive",
    ErrorCode.LINK_CODE_TARGET_INACTIVE: "Your account is inactive",
    ErrorCode.ACCOUNT_INACTIVE: "Account is inactive",
    ErrorCode.MANUAL_MERGE_REQUIRED: "These accounts can only be merged by support",
    ErrorCode.MANUAL_MERGE_NOT_REQUIRED: "These accounts can be merged automatically",
    ErrorCode.MANUAL_MERGE_ALREADY_PENDING: "A merge request is already under review",
    ErrorCode.MANUAL_MERGE_REJECTED: "A merge of these accounts was rejected",
    ErrorCode.MANUAL_MERGE_ALREADY_RESOLVED: "Merge request is already resolved",
    ErrorCode.MANUAL_MERGE_INVALID_PRIMARY: "Primary account must be one of the pair",
    ErrorCode.SUPPORT_DISABLED: "Manual merge requests are disabled",
    ErrorCode.IDENTITY_NOT_LINKED: "This provider is not linked to the account",
    ErrorCode.LAST_IDENTITY: "The last sign-in method cannot be unlinked",
    ErrorCode.PROVIDER_NOT_SUPPORTED: "This provider cannot be unlinked",
    ErrorCode.COOLDOWN_ACTIVE: "Unlinking is temporarily unavailable",
    ErrorCode.UNLINK_OTP_RESEND_COOLDOWN: "Wait before requesting a new code",
    ErrorCode.UNLINK_REQUEST_INVALID: "Unlink request is invalid or expired",
    ErrorCode.UNLINK_REQUEST_MISMATCH: "Unlink request does not match",
    ErrorCode.UNLINK_OTP_INVALID: "Confirmation code is incorrect",
    ErrorCode.UNLINK_OTP_ATTEMPTS_EXCEEDED: "Too many incorrect confirmation codes",
    ErrorCode.UNLINK_OTP_RATE_LIMITED: "Too many confirmation attempts",
    ErrorCode.UNLINK_OTP_DELIVERY_FAILED: "Confirmation code could not be delivered",
    ErrorCode.TELEGRAM_RELINK_REQUIRES_UNLINK: "Unlink the current Telegram first",
    ErrorCode.TELEGRAM_RELINK_COOLDOWN_ACTIVE: "Telegram cannot be linked again yet",
    ErrorCode.TELEGRAM_AUTH_INVALID: "Telegram authorization is invalid",
    ErrorCode.OAUTH_FAILED: "Provider authorization failed",
    ErrorCode.IDENTITY_LINKED_TO_OTHER_ACCOUNT: (
        "This identity belongs to another account, use a link code to merge"
    ),
    ErrorCode.PROVIDER_ALREADY_LINKED: "Another identity of this provider is linked",
}


class DomainError(Exception):
    """Base domain error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class NotAuthorizedError(DomainError):
    """Raised when an account performs an action reserved for admins."""

    def __init__(self, account_id: str, action: str):
        self.account_id = account_id
        self.action = action
        super().__init__(f"Account {account_id} is not allowed to {action}")


class LinkingError(DomainError):
    """Account linking failure with a stable code.

    Attributes:
        code: Machine-readable error code
        message: Human-readable message
        reason: Optional sub-reason (block or conflict reason)
        retry_after_seconds: Relative retry hint for cooldowns and limits
        blocked_until: Absolute end of a cooldown
    """

    kind: ClassVar[ErrorKind]

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        reason: str | None = None,
        retry_after_seconds: int | None = None,
        blocked_until: datetime | None = None,
    ) -> None:
        self.code = code
        self.message = message or DEFAULT_MESSAGES.get(code, code.value)
        self.reason = reason
        self.retry_after_seconds = retry_after_seconds
        self.blocked_until = blocked_until
        super().__init__(f"{code.value}: {self.message}")


class ValidationError(LinkingError):
    """Malformed or self-referencing input."""

    kind = ErrorKind.VALIDATION


class StateConflictError(LinkingError):
    """Code or token already consumed, expired or otherwise unusable."""

    kind = ErrorKind.STATE_CONFLICT


class PolicyBlockError(LinkingError):
    """Business rule forbids the action right now."""

    kind = ErrorKind.POLICY_BLOCK


class RateLimitError(LinkingError):
    """Attempt budget or resend window exhausted."""

    kind = ErrorKind.RATE_LIMIT


class DependencyUnavailableError(LinkingError):
    """A collaborator (support, OTP delivery, OAuth) is disabled or failed."""

    kind = ErrorKind.DEPENDENCY_UNAVAILABLE


class ManualMergeRequiredError(LinkingError):
    """The merge is valid but must be adjudicated by a human."""

    kind = ErrorKind.CONFLICT_REQUIRES_HUMAN

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(ErrorCode.MANUAL_MERGE_REQUIRED, message, reason=reason)
