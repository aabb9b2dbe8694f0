"""Account repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import Account
from cabinet.domain.repository import AccountRepository
from cabinet.domain.value import AccountId
from cabinet.persistence.mappers import account_to_dict, row_to_account
from cabinet.persistence.tables import accounts_table


class PostgresAccountRepository(AccountRepository):
    """PostgreSQL implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, account_id: AccountId) -> Optional[Account]:
        """Find an account by ID.

        The row is locked for the rest of the transaction so that concurrent
        merges touching the same account serialize.
        """
        stmt = (
            select(accounts_table)
            .where(accounts_table.c.id == account_id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_account(dict(row)) if row else None

    async def save(self, account: Account) -> Account:
        """Insert or update an account."""
        values = account_to_dict(account)
        stmt = insert(accounts_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[accounts_table.c.id],
            set_={k: v for k, v in values.items() if k not in ("id", "created_at")},
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return account
