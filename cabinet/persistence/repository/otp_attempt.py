"""OTP attempt log repository implementation using PostgreSQL."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.repository import OtpAttemptRepository
from cabinet.domain.value import AccountId
from cabinet.persistence.tables import otp_attempts_table


class PostgresOtpAttemptRepository(OtpAttemptRepository):
    """PostgreSQL implementation of OtpAttemptRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(self, account_id: AccountId, attempted_at: datetime) -> None:
        """Record one confirm attempt."""
        await self.session.execute(
            otp_attempts_table.insert().values(
                account_id=account_id, attempted_at=attempted_at
            )
        )
        await self.session.flush()

    async def find_since(
        self, account_id: AccountId, since: datetime
    ) -> list[datetime]:
        """Attempt times of an account at or after ``since``, oldest first."""
        stmt = (
            select(otp_attempts_table.c.attempted_at)
            .where(
                otp_attempts_table.c.account_id == account_id,
                otp_attempts_table.c.attempted_at >= since,
            )
            .order_by(otp_attempts_table.c.attempted_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_before(self, before: datetime) -> int:
        """Delete attempts older than ``before``."""
        result = await self.session.execute(
            otp_attempts_table.delete().where(
                otp_attempts_table.c.attempted_at < before
            )
        )
        await self.session.flush()
        return result.rowcount
