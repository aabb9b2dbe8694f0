"""Shared state for in-memory repositories."""

from datetime import datetime

from cabinet.domain.model import (
    Account,
    IdentityUnlinkEvent,
    LinkCode,
    LinkedIdentity,
    ManualMergeTicket,
    UnlinkRequest,
)
from cabinet.domain.value import (
    AccountId,
    LinkCodeId,
    LinkedIdentityId,
    ManualMergeTicketId,
    UnlinkRequestId,
)


class InMemoryStore:
    """Tables for the in-memory repositories.

    One store lives as long as the DI container, so state written in one
    request is visible to the next, as it would be with a database.
    """

    def __init__(self) -> None:
        self.accounts: dict[AccountId, Account] = {}
        self.identities: dict[LinkedIdentityId, LinkedIdentity] = {}
        self.link_codes: dict[LinkCodeId, LinkCode] = {}
        self.unlink_requests: dict[UnlinkRequestId, UnlinkRequest] = {}
        self.otp_attempts: list[tuple[AccountId, datetime]] = []
        self.unlink_events: list[IdentityUnlinkEvent] = []
        self.tickets: dict[ManualMergeTicketId, ManualMergeTicket] = {}
