"""OTP confirm attempt log interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from cabinet.domain.value import AccountId


class OtpAttemptRepository(ABC):
    """Per-account log of unlink confirm attempts.

    Backs the sliding-window rate limit that applies across unlink requests.
    """

    @abstractmethod
    async def record(self, account_id: AccountId, attempted_at: datetime) -> None:
        """Record one confirm attempt."""
        pass

    @abstractmethod
    async def find_since(
        self, account_id: AccountId, since: datetime
    ) -> list[datetime]:
        """Attempt times of an account at or after ``since``, oldest first."""
        pass

    @abstractmethod
    async def delete_before(self, before: datetime) -> int:
        """Delete attempts older than ``before``.

        Returns:
            Number of attempts deleted
        """
        pass
