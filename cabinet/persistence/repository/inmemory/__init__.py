"""In-memory repository implementations for testing."""

from .account import InMemoryAccountRepository
from .identity_unlink_event import InMemoryIdentityUnlinkEventRepository
from .link_code import InMemoryLinkCodeRepository
from .linked_identity import InMemoryLinkedIdentityRepository
from .manual_merge_ticket import InMemoryManualMergeTicketRepository
from .otp_attempt import InMemoryOtpAttemptRepository
from .store import InMemoryStore
from .unlink_request import InMemoryUnlinkRequestRepository

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryIdentityUnlinkEventRepository",
    "InMemoryLinkCodeRepository",
    "InMemoryLinkedIdentityRepository",
    "InMemoryManualMergeTicketRepository",
    "InMemoryOtpAttemptRepository",
    "InMemoryStore",
    "InMemoryUnlinkRequestRepository",
]
