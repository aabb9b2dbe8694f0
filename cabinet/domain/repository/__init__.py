"""Repository interfaces for cabinet account linking.

Interfaces live in the domain layer; implementations live in persistence.
"""

from cabinet.domain.repository.account import AccountRepository
from cabinet.domain.repository.identity_unlink_event import (
    IdentityUnlinkEventRepository,
)
from cabinet.domain.repository.link_code import LinkCodeRepository
from cabinet.domain.repository.linked_identity import LinkedIdentityRepository
from cabinet.domain.repository.manual_merge_ticket import ManualMergeTicketRepository
from cabinet.domain.repository.otp_attempt import OtpAttemptRepository
from cabinet.domain.repository.unlink_request import UnlinkRequestRepository

__all__ = [
    "AccountRepository",
    "IdentityUnlinkEventRepository",
    "LinkCodeRepository",
    "LinkedIdentityRepository",
    "ManualMergeTicketRepository",
    "OtpAttemptRepository",
    "UnlinkRequestRepository",
]
