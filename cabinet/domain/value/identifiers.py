"""Strongly typed identifiers for cabinet domain entities."""

from typing import NewType
from uuid import UUID

AccountId = NewType("AccountId", UUID)
LinkedIdentityId = NewType("LinkedIdentityId", UUID)
LinkCodeId = NewType("LinkCodeId", UUID)
UnlinkRequestId = NewType("UnlinkRequestId", UUID)
ManualMergeTicketId = NewType("ManualMergeTicketId", UUID)
IdentityUnlinkEventId = NewType("IdentityUnlinkEventId", UUID)
