"""Link code repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from cabinet.domain.model.link_code import LinkCode
from cabinet.domain.value import AccountId, LinkCodeId, LinkCodeStatus, LinkCodeValue


class LinkCodeRepository(ABC):
    """Repository for LinkCode entity.

    Attempt consumption and claiming are atomic compare-and-set operations so
    that concurrent previews and confirms cannot bypass the attempt budget or
    merge twice.
    """

    @abstractmethod
    async def find_by_id(self, link_code_id: LinkCodeId) -> LinkCode | None:
        """Find a link code by ID."""
        pass

    @abstractmethod
    async def find_by_code(self, code: LinkCodeValue) -> LinkCode | None:
        """Find the most recent link code with this value.

        Args:
            code: Normalized code value

        Returns:
            The newest matching code in any status, None if never issued
        """
        pass

    @abstractmethod
    async def exists_active_code(self, code: LinkCodeValue) -> bool:
        """Check whether an active code with this value exists."""
        pass

    @abstractmethod
    async def save(self, link_code: LinkCode) -> LinkCode:
        """Save a link code (create or update)."""
        pass

    @abstractmethod
    async def revoke_active_for_account(self, account_id: AccountId) -> int:
        """Revoke every active code of a source account.

        Returns:
            Number of codes revoked
        """
        pass

    @abstractmethod
    async def consume_attempt(self, link_code_id: LinkCodeId) -> LinkCode | None:
        """Atomically consume one attempt of an active code.

        When the incremented count exceeds ``max_attempts`` the code moves to
        ``exhausted`` in the same statement.

        Args:
            link_code_id: Code to consume an attempt from

        Returns:
            The updated code, or None if the code was no longer active
        """
        pass

    @abstractmethod
    async def claim(
        self,
        link_code_id: LinkCodeId,
        status: LinkCodeStatus,
        claimed_by: AccountId,
        claimed_at: datetime,
    ) -> bool:
        """Atomically move an active code to a terminal status.

        Args:
            link_code_id: Code to claim
            status: ``consumed`` or ``manual_review``
            claimed_by: Account redeeming the code
            claimed_at: Claim time

        Returns:
            True if this call won the claim, False if the code was not active
        """
        pass

    @abstractmethod
    async def delete_stale(self, before: datetime) -> int:
        """Delete codes that expired before the given time.

        Codes in ``manual_review`` stay, their ticket references them.

        Returns:
            Number of codes deleted
        """
        pass
