"""In-memory link code repository for testing."""

from datetime import datetime
from typing import Optional

from cabinet.domain.model import LinkCode
from cabinet.domain.repository import LinkCodeRepository
from cabinet.domain.value import AccountId, LinkCodeId, LinkCodeStatus, LinkCodeValue

from .store import InMemoryStore


class InMemoryLinkCodeRepository(LinkCodeRepository):
    """In-memory implementation of LinkCodeRepository for testing.

    Compare-and-set methods contain no awaits, so they are atomic under
    asyncio just like their single-statement SQL counterparts.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @property
    def _codes(self) -> dict[LinkCodeId, LinkCode]:
        return self._store.link_codes

    async def find_by_id(self, link_code_id: LinkCodeId) -> Optional[LinkCode]:
        """Find a link code by ID."""
        return self._codes.get(link_code_id)

    async def find_by_code(self, code: LinkCodeValue) -> Optional[LinkCode]:
        """Find the newest link code with this value."""
        matches = [c for c in self._codes.values() if c.code == code]
        if not matches:
            return None
        return max(matches, key=lambda c: c.created_at)

    async def exists_active_code(self, code: LinkCodeValue) -> bool:
        """Check whether an active code with this value exists."""
        return any(
            c.code == code and c.status == LinkCodeStatus.ACTIVE
            for c in self._codes.values()
        )

    async def save(self, link_code: LinkCode) -> LinkCode:
        """Save a link code."""
        self._codes[link_code.id] = link_code
        return link_code

    async def revoke_active_for_account(self, account_id: AccountId) -> int:
        """Revoke every active code of a source account."""
        revoked = 0
        for code_id, code in list(self._codes.items()):
            if (
                code.source_account_id == account_id
                and code.status == LinkCodeStatus.ACTIVE
            ):
                self._codes[code_id] = code.model_copy(
                    update={"status": LinkCodeStatus.REVOKED}
                )
                revoked += 1
        return revoked

    async def consume_attempt(self, link_code_id: LinkCodeId) -> Optional[LinkCode]:
        """Consume one attempt of an active code."""
        code = self._codes.get(link_code_id)
        if code is None or code.status != LinkCodeStatus.ACTIVE:
            return None
        attempts = code.attempts_used + 1
        status = (
            LinkCodeStatus.EXHAUSTED
            if attempts > code.max_attempts
            else LinkCodeStatus.ACTIVE
        )
        updated = code.model_copy(update={"attempts_used": attempts, "status": status})
        self._codes[link_code_id] = updated
        return updated

    async def claim(
        self,
        link_code_id: LinkCodeId,
        status: LinkCodeStatus,
        claimed_by: AccountId,
        claimed_at: datetime,
    ) -> bool:
        """Move an active code to a terminal status."""
        code = self._codes.get(link_code_id)
        if code is None or code.status != LinkCodeStatus.ACTIVE:
            return False
        self._codes[link_code_id] = code.model_copy(
            update={
                "status": status,
                "consumed_at": claimed_at,
                "consumed_by_account_id": claimed_by,
            }
        )
        return True

    async def delete_stale(self, before: datetime) -> int:
        """Delete expired codes not held by a manual merge ticket."""
        stale = [
            code_id
            for code_id, code in self._codes.items()
            if code.expires_at < before and code.status != LinkCodeStatus.MANUAL_REVIEW
        ]
        for code_id in stale:
            del self._codes[code_id]
        return len(stale)
