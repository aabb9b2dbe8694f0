"""PostgreSQL repository implementations."""

from cabinet.persistence.repository.account import PostgresAccountRepository
from cabinet.persistence.repository.identity_unlink_event import (
    PostgresIdentityUnlinkEventRepository,
)
from cabinet.persistence.repository.link_code import PostgresLinkCodeRepository
from cabinet.persistence.repository.linked_identity import (
    PostgresLinkedIdentityRepository,
)
from cabinet.persistence.repository.manual_merge_ticket import (
    PostgresManualMergeTicketRepository,
)
from cabinet.persistence.repository.otp_attempt import PostgresOtpAttemptRepository
from cabinet.persistence.repository.unlink_request import (
    PostgresUnlinkRequestRepository,
)

__all__ = [
    "PostgresAccountRepository",
    "PostgresIdentityUnlinkEventRepository",
    "PostgresLinkCodeRepository",
    "PostgresLinkedIdentityRepository",
    "PostgresManualMergeTicketRepository",
    "PostgresOtpAttemptRepository",
    "PostgresUnlinkRequestRepository",
]
