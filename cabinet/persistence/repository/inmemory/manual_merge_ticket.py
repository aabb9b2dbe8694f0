"""In-memory manual merge ticket repository for testing."""

from typing import Optional

from cabinet.domain.model import ManualMergeTicket
from cabinet.domain.repository import ManualMergeTicketRepository
from cabinet.domain.value import AccountId, ManualMergeDecision, ManualMergeTicketId

from .store import InMemoryStore


class InMemoryManualMergeTicketRepository(ManualMergeTicketRepository):
    """In-memory implementation of ManualMergeTicketRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _newest_first(self) -> list[ManualMergeTicket]:
        return sorted(
            self._store.tickets.values(), key=lambda t: t.created_at, reverse=True
        )

    async def find_by_id(
        self, ticket_id: ManualMergeTicketId
    ) -> Optional[ManualMergeTicket]:
        """Find a ticket by ID."""
        return self._store.tickets.get(ticket_id)

    async def save(self, ticket: ManualMergeTicket) -> ManualMergeTicket:
        """Save a ticket."""
        self._store.tickets[ticket.id] = ticket
        return ticket

    async def find_latest_by_requester(
        self, account_id: AccountId
    ) -> Optional[ManualMergeTicket]:
        """Find the newest ticket raised by an account."""
        for ticket in self._newest_first():
            if ticket.requester_account_id == account_id:
                return ticket
        return None

    async def find_latest_for_pair(
        self, first_account_id: AccountId, second_account_id: AccountId
    ) -> Optional[ManualMergeTicket]:
        """Find the newest ticket between two accounts in either direction."""
        pair = {first_account_id, second_account_id}
        for ticket in self._newest_first():
            if {ticket.requester_account_id, ticket.source_account_id} == pair:
                return ticket
        return None

    async def find_by_decision(
        self,
        decision: ManualMergeDecision | None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ManualMergeTicket]:
        """List tickets, newest first."""
        tickets = [
            t for t in self._newest_first() if decision is None or t.decision == decision
        ]
        return tickets[offset : offset + limit]

    async def count_by_decision(self, decision: ManualMergeDecision | None) -> int:
        """Count tickets with a decision."""
        return sum(
            1
            for t in self._store.tickets.values()
            if decision is None or t.decision == decision
        )
