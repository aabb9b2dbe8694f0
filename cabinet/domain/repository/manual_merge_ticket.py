"""Manual merge ticket repository interface."""

from abc import ABC, abstractmethod

from cabinet.domain.model.manual_merge_ticket import ManualMergeTicket
from cabinet.domain.value import AccountId, ManualMergeDecision, ManualMergeTicketId


class ManualMergeTicketRepository(ABC):
    """Repository for ManualMergeTicket entity."""

    @abstractmethod
    async def find_by_id(
        self, ticket_id: ManualMergeTicketId
    ) -> ManualMergeTicket | None:
        """Find a ticket by ID."""
        pass

    @abstractmethod
    async def save(self, ticket: ManualMergeTicket) -> ManualMergeTicket:
        """Save a ticket (create or update)."""
        pass

    @abstractmethod
    async def find_latest_by_requester(
        self, account_id: AccountId
    ) -> ManualMergeTicket | None:
        """Find the newest ticket raised by an account.

        Args:
            account_id: Requester account ID

        Returns:
            Newest ticket by ``created_at``, None if the account has none
        """
        pass

    @abstractmethod
    async def find_latest_for_pair(
        self, first_account_id: AccountId, second_account_id: AccountId
    ) -> ManualMergeTicket | None:
        """Find the newest ticket between two accounts in either direction."""
        pass

    @abstractmethod
    async def find_by_decision(
        self,
        decision: ManualMergeDecision | None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ManualMergeTicket]:
        """List tickets, newest first.

        Args:
            decision: Filter by decision (None returns all tickets)
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            Page of tickets
        """
        pass

    @abstractmethod
    async def count_by_decision(self, decision: ManualMergeDecision | None) -> int:
        """Count tickets with a decision (None counts all)."""
        pass
