"""Domain model entities for cabinet account linking."""

from cabinet.domain.model.account import Account
from cabinet.domain.model.identity_unlink_event import IdentityUnlinkEvent
from cabinet.domain.model.link_code import LinkCode
from cabinet.domain.model.linked_identity import LinkedIdentity
from cabinet.domain.model.manual_merge_ticket import ManualMergeTicket
from cabinet.domain.model.unlink_request import UnlinkRequest

__all__ = [
    "Account",
    "IdentityUnlinkEvent",
    "LinkCode",
    "LinkedIdentity",
    "ManualMergeTicket",
    "UnlinkRequest",
]
