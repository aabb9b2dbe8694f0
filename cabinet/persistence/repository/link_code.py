"""Link code repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import LinkCode
from cabinet.domain.repository import LinkCodeRepository
from cabinet.domain.value import AccountId, LinkCodeId, LinkCodeStatus, LinkCodeValue
from cabinet.persistence.mappers import link_code_to_dict, row_to_link_code
from cabinet.persistence.tables import link_codes_table

_ACTIVE = LinkCodeStatus.ACTIVE.value


class PostgresLinkCodeRepository(LinkCodeRepository):
    """PostgreSQL implementation of LinkCodeRepository.

    Attempt consumption and claims are single ``UPDATE ... WHERE status =
    'active'`` statements; row locks make concurrent callers queue behind
    each other and see the committed status.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, link_code_id: LinkCodeId) -> Optional[LinkCode]:
        """Find a link code by ID."""
        stmt = select(link_codes_table).where(link_codes_table.c.id == link_code_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_link_code(dict(row)) if row else None

    async def find_by_code(self, code: LinkCodeValue) -> Optional[LinkCode]:
        """Find the newest link code with this value."""
        stmt = (
            select(link_codes_table)
            .where(link_codes_table.c.code == code.root)
            .order_by(link_codes_table.c.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_link_code(dict(row)) if row else None

    async def exists_active_code(self, code: LinkCodeValue) -> bool:
        """Check whether an active code with this value exists."""
        stmt = select(link_codes_table.c.id).where(
            link_codes_table.c.code == code.root,
            link_codes_table.c.status == _ACTIVE,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def save(self, link_code: LinkCode) -> LinkCode:
        """Save a link code (create or update)."""
        values = link_code_to_dict(link_code)
        existing = await self.find_by_id(link_code.id)
        if existing:
            stmt = (
                update(link_codes_table)
                .where(link_codes_table.c.id == link_code.id)
                .values(**values)
            )
        else:
            stmt = link_codes_table.insert().values(**values)
        await self.session.execute(stmt)
        await self.session.flush()
        return link_code

    async def revoke_active_for_account(self, account_id: AccountId) -> int:
        """Revoke every active code of a source account."""
        stmt = (
            update(link_codes_table)
            .where(
                link_codes_table.c.source_account_id == account_id,
                link_codes_table.c.status == _ACTIVE,
            )
            .values(status=LinkCodeStatus.REVOKED.value)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def consume_attempt(self, link_code_id: LinkCodeId) -> Optional[LinkCode]:
        """Increment attempts and exhaust the code past its budget in one UPDATE."""
        attempts = link_codes_table.c.attempts_used + 1
        stmt = (
            update(link_codes_table)
            .where(
                link_codes_table.c.id == link_code_id,
                link_codes_table.c.status == _ACTIVE,
            )
            .values(
                attempts_used=attempts,
                status=case(
                    (
                        attempts > link_codes_table.c.max_attempts,
                        LinkCodeStatus.EXHAUSTED.value,
                    ),
                    else_=link_codes_table.c.status,
                ),
            )
            .returning(*link_codes_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()
        return row_to_link_code(dict(row)) if row else None

    async def claim(
        self,
        link_code_id: LinkCodeId,
        status: LinkCodeStatus,
        claimed_by: AccountId,
        claimed_at: datetime,
    ) -> bool:
        """Compare-and-set an active code to a terminal status."""
        stmt = (
            update(link_codes_table)
            .where(
                link_codes_table.c.id == link_code_id,
                link_codes_table.c.status == _ACTIVE,
            )
            .values(
                status=status.value,
                consumed_at=claimed_at,
                consumed_by_account_id=claimed_by,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def delete_stale(self, before: datetime) -> int:
        """Delete expired codes not held by a manual merge ticket."""
        stmt = link_codes_table.delete().where(
            link_codes_table.c.expires_at < before,
            link_codes_table.c.status != LinkCodeStatus.MANUAL_REVIEW.value,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
