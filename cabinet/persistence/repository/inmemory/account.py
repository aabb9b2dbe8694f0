"""In-memory account repository for testing."""

from typing import Optional

from cabinet.domain.model import Account
from cabinet.domain.repository import AccountRepository
from cabinet.domain.value import AccountId

from .store import InMemoryStore


class InMemoryAccountRepository(AccountRepository):
    """In-memory implementation of AccountRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def find_by_id(self, account_id: AccountId) -> Optional[Account]:
        """Find account by ID."""
        return self._store.accounts.get(account_id)

    async def save(self, account: Account) -> Account:
        """Save account."""
        self._store.accounts[account.id] = account
        return account
